from pathlib import Path

from ledger_categorizer.main import load_transactions


def test_load_transactions(tmp_path: Path) -> None:
    data = tmp_path / "model_data.csv"
    data.write_text(
        "id,details,category\n"
        "1,Starbucks Coffee,Food\n"
        "2,Shell Gas,Transport\n"
        "3,Costa Coffee,Food\n"
        "4,Salary,\n"
        "x,Broken row,Food\n",
        encoding="utf-8",
    )

    transactions = load_transactions(data)

    assert [t.id for t in transactions] == [1, 2, 3, 4]
    assert transactions[0].category == transactions[2].category
    assert transactions[0].category.title == "Food"
    assert transactions[1].category.id == 2
    assert transactions[3].category is None
