from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.clients.permissions import IsOwner
from .models import Payment
from .serializers import (
    PaymentSerializer,
    PaymentFilterSerializer,
    PaymentCreateSerializer,
    PaymentUpdateSerializer,
    MarkPaidSerializer,
    OutstandingFilterSerializer,
    OutstandingSummarySerializer,
    PixChargeSerializer,
)
from .services import (
    PaymentsServiceError,
    PixPaymentGenerator,
    create_payment,
    mark_paid,
    cancel_payment,
    refund_payment,
    outstanding_summary,
)


class PaymentPagination(PageNumberPagination):
    """Custom pagination for payments."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PaymentViewSet(viewsets.ModelViewSet):
    """
    ViewSet for payments.

    list: Payments of the current user (filter: client, status, method,
          due_from, due_to, session, package)
    create: Register a manual charge
    retrieve: Payment details
    partial_update: Edit due date, method or notes
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = PaymentPagination
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_queryset(self):
        queryset = (
            Payment.objects
            .filter(owner=self.request.user)
            .select_related('client', 'session', 'package')
        )

        if self.action != 'list':
            return queryset

        filter_serializer = PaymentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('client'):
            queryset = queryset.filter(client_id=params['client'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('method'):
            queryset = queryset.filter(method=params['method'])
        if params.get('due_from'):
            queryset = queryset.filter(due_date__gte=params['due_from'])
        if params.get('due_to'):
            queryset = queryset.filter(due_date__lte=params['due_to'])
        if params.get('session'):
            queryset = queryset.filter(session_id=params['session'])
        if params.get('package'):
            queryset = queryset.filter(package_id=params['package'])

        return queryset

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PaymentCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        payment = create_payment(owner=request.user, **serializer.validated_data)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentUpdateSerializer, responses={200: PaymentSerializer})
    def partial_update(self, request, *args, **kwargs):
        payment = self.get_object()
        serializer = PaymentUpdateSerializer(payment, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=MarkPaidSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'], url_path='mark-paid', url_name='mark-paid')
    def settle(self, request, pk=None):
        """
        Settle a payment.

        POST /api/payments/{id}/mark-paid/
        Body: {"method": "pix", "paid_at": "2024-05-06T14:00:00Z"} (both optional)
        """
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = mark_paid(payment=self.get_object(), **serializer.validated_data)
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        payment = cancel_payment(payment=self.get_object())
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        payment = refund_payment(payment=self.get_object())
        return Response(PaymentSerializer(payment).data)

    @extend_schema(responses={200: PixChargeSerializer})
    @action(detail=True, methods=['post'])
    def pix(self, request, pk=None):
        """
        Generate the PIX BR Code and QR image for a payment.

        POST /api/payments/{id}/pix/

        Requires a PIX key on the therapist's payout details.
        """
        payment = self.get_object()
        if not payment.is_outstanding:
            return Response(
                {'error': 'PIX charges can only be generated for outstanding payments'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            payload = PixPaymentGenerator.generate_for_payment(payment)
        except PaymentsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = {
            'reference': payment.reference,
            'amount': payment.amount,
            'payload': payload,
            'qr_code_base64': PixPaymentGenerator.qr_image_base64(payload),
        }
        return Response(PixChargeSerializer(data).data)

    @extend_schema(responses={200: OutstandingSummarySerializer})
    @action(detail=False, methods=['get'])
    def outstanding(self, request):
        """
        What clients still owe.

        GET /api/payments/outstanding/?client={id}
        """
        params = OutstandingFilterSerializer(data=request.query_params, context={'request': request})
        params.is_valid(raise_exception=True)

        summary = outstanding_summary(owner=request.user, client=params.validated_data.get('client'))
        return Response(OutstandingSummarySerializer(summary).data)
