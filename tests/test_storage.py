import csv

from dentalscan.models import ConfidenceBand, Result, Target
from dentalscan.storage import (
    RESULT_HEADER,
    is_placeholder,
    load_targets,
    output_path_for,
    process_status,
    skip_reason,
    write_results,
)

INPUT = (
    "name,website,email,phone\n"
    "Smile Dental,https://smile.example.com,hi@smile.example.com,010\n"
    "No Web Dental,,contact@noweb.example.com,011\n"
    "Ghost Dental,,X,012\n"
    "Short Row\n"
    "\n"
    "Placeholder Web,x,-,013\n"
    '"Comma, Dental",https://comma.example.com,X,014\n'
)


def write_input(tmp_path, text=INPUT, encoding="utf-8"):
    path = tmp_path / "clinics.csv"
    path.write_bytes(text.encode(encoding))
    return path


def test_load_targets_filters_rows(tmp_path):
    table = load_targets(write_input(tmp_path))
    assert table.header == ["name", "website", "email", "phone"]
    assert len(table.rows) == 6
    assert [t.name for t in table.targets] == ["Smile Dental", "No Web Dental", "Comma, Dental"]
    assert table.targets[1] == Target("No Web Dental", "", "contact@noweb.example.com", row_index=1)
    assert table.targets[2].email == ""
    assert table.targets[2].row_index == 5
    assert table.skipped == 3


def test_load_strips_bom(tmp_path):
    table = load_targets(write_input(tmp_path, "\ufeff" + INPUT))
    assert table.header[0] == "name"


def test_auto_encoding_falls_back_to_cp949(tmp_path):
    text = "이름,웹사이트,이메일\n스마일치과,https://smile.example.com,X\n"
    table = load_targets(write_input(tmp_path, text, encoding="cp949"))
    assert table.encoding == "cp949"
    assert table.targets[0].name == "스마일치과"


def test_explicit_encoding(tmp_path):
    text = "이름,웹사이트,이메일\n스마일치과,https://smile.example.com,X\n"
    table = load_targets(write_input(tmp_path, text, encoding="euc-kr"), encoding="euc-kr")
    assert table.targets[0].website == "https://smile.example.com"


def test_placeholders():
    assert is_placeholder("")
    assert is_placeholder(" X ")
    assert is_placeholder("-")
    assert not is_placeholder("a@b.c")


def test_skip_reasons():
    assert skip_reason("", "X") == "no website or email"
    assert skip_reason("", "a@b.c") == "no website"
    assert skip_reason("https://a.example.com", "") == "no email (website only)"


def test_process_status():
    def r(band):
        return Result(name="", website="", email="", band=band)

    assert process_status(r(ConfidenceBand.HIGH)) == "found"
    assert process_status(r(ConfidenceBand.NONE)) == "not found"
    assert process_status(r(ConfidenceBand.ERROR)) == "error"
    assert process_status(r(ConfidenceBand.TIMEOUT)) == "timeout"


def test_output_path_for(tmp_path):
    assert output_path_for(tmp_path / "list.CSV") == tmp_path / "list_3d_results.csv"
    assert output_path_for(tmp_path / "list.txt") == tmp_path / "list.txt_3d_results.csv"


def test_write_results_preserves_rows(tmp_path):
    table = load_targets(write_input(tmp_path))
    results = [
        Result.for_target(
            table.targets[0],
            has_equipment=True,
            band=ConfidenceBand.MEDIUM,
            score=42,
            evidence='3D scanner: itero, "trios" | pages examined: 5',
        ),
        Result.for_target(table.targets[1], band=ConfidenceBand.NONE, reason="no website"),
        Result.error(table.targets[2], "seed page unreachable: HTTP 500"),
    ]
    out = write_results(tmp_path / "out.csv", table, results)

    raw = out.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    assert b'"3D scanner: itero, ""trios"" | pages examined: 5"' in raw

    with open(out, encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["name", "website", "email", "phone", *RESULT_HEADER]
    assert len(rows) == 1 + len(table.rows)
    assert rows[1][4:] == ["yes", "MEDIUM", "42", '3D scanner: itero, "trios" | pages examined: 5', "found", ""]
    assert rows[2][4:] == ["no", "NONE", "0", "no website", "not found", ""]
    assert rows[3][4:] == ["not checked", "SKIP", "0", "no website or email", "skipped", ""]
    assert rows[4] == ["Short Row", "not checked", "SKIP", "0", "no website or email", "skipped", ""]
    assert rows[6][0] == "Comma, Dental"
    assert rows[6][4:7] == ["no", "ERROR", "0"]
    assert rows[6][9] == "seed page unreachable: HTTP 500"
