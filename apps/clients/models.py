from django.db import models
import uuid


class Client(models.Model):
    """A therapist's client (patient). Every client belongs to exactly one owner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='clients')

    name = models.CharField(max_length=200)
    email = models.EmailField(max_length=255, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    birth_date = models.DateField(null=True, blank=True)

    # Clinical record
    clinical_notes = models.TextField(blank=True)
    history = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        constraints = [
            models.UniqueConstraint(
                fields=['owner', 'email'],
                condition=~models.Q(email=''),
                name='unique_client_email_per_owner',
            ),
        ]
        indexes = [
            models.Index(fields=['owner', 'is_active']),
            models.Index(fields=['owner', 'name']),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name


class RegistrationInvite(models.Model):
    """
    Single-use invitation for a client to fill in their own registration.

    The link sent to the client carries a signed reference to this row; the
    row records whether the link was already used and for which client.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='registration_invites')
    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registration_invites',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'client_registration_invites'
        ordering = ['-created_at']

    def __str__(self):
        return f"Invite {self.id} ({self.owner_id})"

    @property
    def is_used(self):
        return self.used_at is not None
