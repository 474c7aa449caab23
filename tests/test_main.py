from seat_chart import snapshot
from seat_chart.main import main


def test_assign_and_show(tmp_path, capsys):
    roster = tmp_path / "roster.txt"
    roster.write_text("01 王小明\n02 林大衛\n03 陳小華\n", encoding="utf-8")
    out = tmp_path / "class.json"
    pdf = tmp_path / "class.pdf"

    code = main([
        "assign", str(roster), "--rows", "2", "--cols", "2",
        "--lock", "2-2", "--seed", "3", "--snapshot", str(out), "--pdf", str(pdf),
    ])

    assert code == 0
    assert "王小明" in capsys.readouterr().out
    data = snapshot.load_snapshot(out).data
    assert len(data.seating) == 3
    assert data.waiting_pool == []
    assert pdf.exists()

    assert main(["show", str(out)]) == 0
    shown = capsys.readouterr().out
    assert "X" in shown and "林大衛" in shown


def test_assign_reports_capacity_error(tmp_path, capsys):
    roster = tmp_path / "roster.txt"
    roster.write_text("A\nB\nC\n", encoding="utf-8")

    assert main(["assign", str(roster), "--rows", "1", "--cols", "2"]) == 1
    assert "exceeds" in capsys.readouterr().err
