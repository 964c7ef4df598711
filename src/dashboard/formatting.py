"""
Formateo de montos para el dashboard.
"""

from typing import Optional

from config.constants import MINOR_UNITS_PER_MAJOR


def format_currency(amount: int, symbol: Optional[str] = None) -> str:
    """
    Formatea un monto en centavos como moneda.

    Args:
        amount: Monto en unidades menores
        symbol: Símbolo de moneda (default: settings.CURRENCY_SYMBOL)

    Returns:
        String formateado (ej: 1234567 -> "$12,345.67")
    """
    if symbol is None:
        from config.settings import settings
        symbol = settings.CURRENCY_SYMBOL

    value = amount / MINOR_UNITS_PER_MAJOR
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
