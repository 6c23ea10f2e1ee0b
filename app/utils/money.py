def format_brl(cents: int | None) -> str:
    """Formata centavos como moeda brasileira: 150000 -> "R$ 1.500,00"."""
    value = (cents or 0) / 100
    formatted = f"{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"
