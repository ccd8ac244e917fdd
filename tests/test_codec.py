import datetime as dt

from ledger.codec import HEADER, export_filename, parse_csv, parse_row, to_csv_string
from ledger.domain import Kind, LedgerEntry


def make_sample():
    return (
        LedgerEntry(11, "2025-01-01", Kind.EXPENSE, 10, "Groceries", "hello"),
        LedgerEntry(12, "2025-01-02", Kind.INCOME, 20.5, "", "world"),
    )


def test_export_header_and_rows():
    csv = to_csv_string(make_sample())
    lines = csv.split("\n")
    assert lines[0] == "id,date,type,amount,category,note"
    assert lines[1] == "11,2025-01-01,expense,10,Groceries,hello"
    assert lines[2] == "12,2025-01-02,income,20.5,,world"
    assert len(lines) == 3
    assert not csv.endswith("\n")


def test_export_empty_is_header_only():
    assert to_csv_string(()) == HEADER


def test_export_replaces_commas_in_notes():
    csv = to_csv_string([LedgerEntry(13, "2025-01-06", Kind.EXPENSE, 50, "Other", "a,b,c")])
    assert csv.endswith("a;b;c")
    assert csv.split("\n")[1].count(",") == 5


def test_export_filename():
    assert export_filename(dt.date(2025, 8, 9)) == "transactions-2025-08-09.csv"


def test_roundtrip_preserves_count_amount_date():
    sample = make_sample()
    parsed = parse_csv(to_csv_string(sample))
    assert len(parsed) == len(sample)
    for before, after in zip(sample, parsed):
        assert after.amount == before.amount
        assert after.date == before.date
        assert after.kind is before.kind
        assert after.id == before.id


def test_parses_crlf():
    text = "id,date,type,amount,category,note\r\n1,2025-01-03,expense,15,Fuel,gas\r\n2,2025-01-04,expense,30,Restaurants,food"
    parsed = parse_csv(text)
    assert len(parsed) == 2
    assert parsed[1].category == "Restaurants"
    assert parsed[1].note == "food"


def test_parses_lf_with_trailing_newline_and_blank_lines():
    text = "id,date,type,amount,category,note\n\n3,2025-01-05,income,100,,client\n   \n"
    parsed = parse_csv(text)
    assert len(parsed) == 1
    assert parsed[0].kind is Kind.INCOME
    assert parsed[0].category == ""


def test_infers_income_from_positive_amount():
    parsed = parse_csv("date,amount\n2025-08-01,123.45")
    assert len(parsed) == 1
    assert parsed[0].kind is Kind.INCOME
    assert parsed[0].amount == 123.45


def test_infers_expense_and_strips_sign():
    parsed = parse_csv("date,amount\n2025-08-02,-88.9")
    assert len(parsed) == 1
    assert parsed[0].kind is Kind.EXPENSE
    assert parsed[0].amount == 88.9


def test_bank_credit_debit_terms():
    parsed = parse_csv("date,type,amount\n2025-08-03,credit,100\n2025-08-04,debit,50")
    assert [e.kind for e in parsed] == [Kind.INCOME, Kind.EXPENSE]


def test_explicit_type_wins_over_sign():
    parsed = parse_csv("date,type,amount\n2025-08-03,income,-40")
    assert parsed[0].kind is Kind.INCOME
    assert parsed[0].amount == 40


def test_bom_is_ignored():
    plain = "date,type,amount\n2025-08-07,income,1"
    with_bom = "\ufeff" + plain
    a, b = parse_csv(plain), parse_csv(with_bom)
    assert len(b) == 1
    assert [(e.date, e.kind, e.amount) for e in a] == [(e.date, e.kind, e.amount) for e in b]


def test_zero_amount_without_type_is_dropped():
    assert parse_csv("date,amount\n2025-08-09,0") == ()


def test_zero_amount_with_type_is_dropped():
    assert parse_csv("date,type,amount\n2025-08-09,expense,0") == ()


def test_missing_schema_yields_nothing():
    assert parse_csv("when,value\n2025-08-01,10") == ()
    assert parse_csv("date,type\n2025-08-01,income") == ()
    assert parse_csv("") == ()
    assert parse_csv(None) == ()
    assert parse_csv("\n\r\n") == ()


def test_malformed_rows_are_skipped_not_fatal():
    text = "\n".join([
        "date,type,amount,note",
        ",income,10,no date",
        "2025-08-01,income,,no amount",
        "2025-08-01,income,abc,bad amount",
        "2025-08-01,income,inf,infinite",
        "2025-08-01,transfer,nan,not a number",
        "2025-08-02,expense,12.5,ok",
        "2025-08-03",
    ])
    parsed = parse_csv(text)
    assert len(parsed) == 1
    assert parsed[0].note == "ok"


def test_quoted_amounts_are_not_unquoted():
    assert parse_csv('date,amount\n2025-08-01,"1234.5"') == ()


def test_parse_row_reports_skip_reason():
    columns = {"date": 0, "amount": 1}
    assert parse_row("2025-08-01,1234.5", columns).get_or_else(None).amount == 1234.5
    assert parse_row("2025-08-01,0", columns).get_error() == "zero amount without a type"
    assert parse_row(",5", columns).get_error() == "missing date"


def test_header_names_are_trimmed_and_columns_reordered():
    parsed = parse_csv(" amount , date ,category\n-20,2025-08-05, Fuel ")
    assert parsed[0].date == "2025-08-05"
    assert parsed[0].category == "Fuel"
    assert parsed[0].kind is Kind.EXPENSE


def test_numeric_ids_kept_and_missing_ids_synthesized_unique():
    parsed = parse_csv("id,date,amount\n7,2025-08-01,5\n,2025-08-02,6\nabc,2025-08-03,7\n2.5,2025-08-04,8")
    assert parsed[0].id == 7
    assert isinstance(parsed[0].id, int)
    assert parsed[3].id == 2.5
    synthesized = [parsed[1].id, parsed[2].id]
    assert len(set(synthesized)) == 2

    more = parse_csv("date,amount\n" + "\n".join("2025-08-01,1" for _ in range(50)))
    assert len({e.id for e in more}) == 50


def test_every_parsed_entry_satisfies_invariants():
    text = "date,type,amount\n2025-08-01,,-3\n2025-08-01,,0\n2025-08-01,?,4\n2025-08-01,out,-0.01"
    for e in parse_csv(text):
        assert e.amount > 0
        assert e.kind in (Kind.INCOME, Kind.EXPENSE)


def test_only_plain_ascii_numbers_are_accepted():
    assert parse_csv("date,amount\n2025-08-01,1_000\n2025-08-02,١٢\n2025-08-03,1e999") == ()
    parsed = parse_csv("date,amount\n2025-08-01,1.5e2\n2025-08-02,-.5\n2025-08-03,+7.")
    assert [e.amount for e in parsed] == [150.0, 0.5, 7.0]
    columns = {"date": 0, "amount": 1}
    assert parse_row("2025-08-01,1_000", columns).get_error() == "unparseable amount '1_000'"


def test_underscored_or_non_ascii_ids_are_synthesized():
    parsed = parse_csv("id,date,amount\n1_0,2025-08-01,5\n٣,2025-08-02,6")
    assert len(parsed) == 2
    assert parsed[0].id != 10
    assert parsed[1].id != 3
