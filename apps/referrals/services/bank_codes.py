"""Brazilian bank (COMPE) codes used for TED transfers."""

BANK_CODES = {
    'banco do brasil': '001',
    'bradesco': '237',
    'itau': '341',
    'itaú': '341',
    'santander': '033',
    'caixa economica': '104',
    'caixa econômica': '104',
    'caixa': '104',
    'nubank': '260',
    'inter': '077',
    'c6 bank': '336',
    'c6': '336',
    'pagbank': '290',
    'pagseguro': '290',
    'mercado pago': '323',
    'picpay': '380',
    'btg pactual': '208',
    'btg': '208',
    'neon': '735',
    'next': '237',
    'original': '212',
    'safra': '422',
    'sicoob': '756',
    'sicredi': '748',
    'banrisul': '041',
}

DEFAULT_BANK_CODE = '001'


def get_bank_code(bank_name: str) -> str:
    """
    Resolve a bank name as typed by the user to its three digit code.

    A name that already is a code is returned as is. Otherwise the first
    known name contained in (or containing) the input wins; unknown banks
    fall back to Banco do Brasil.
    """
    name = (bank_name or '').strip().lower()
    if not name:
        return DEFAULT_BANK_CODE
    if name.isdigit() and len(name) <= 3:
        return name.zfill(3)

    if name in BANK_CODES:
        return BANK_CODES[name]
    for known, code in BANK_CODES.items():
        if known in name or name in known:
            return code
    return DEFAULT_BANK_CODE
