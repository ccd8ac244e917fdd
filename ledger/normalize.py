from ledger.domain import Kind

# Bank exports mix English and Hebrew direction words.
KIND_ALIASES = {
    "income": Kind.INCOME,
    "הכנסה": Kind.INCOME,
    "in": Kind.INCOME,
    "כניסה": Kind.INCOME,
    "+": Kind.INCOME,
    "credit": Kind.INCOME,
    "זכות": Kind.INCOME,
    "expense": Kind.EXPENSE,
    "הוצאה": Kind.EXPENSE,
    "out": Kind.EXPENSE,
    "-": Kind.EXPENSE,
    "debit": Kind.EXPENSE,
    "חובה": Kind.EXPENSE,
}


def normalize_kind(raw) -> Kind:
    """Map a loose direction token to a Kind; unrecognised input is Kind.UNKNOWN."""
    token = str(raw if raw is not None else "").strip().lower()
    return KIND_ALIASES.get(token, Kind.UNKNOWN)
