from udifkit.cli import main

RAW = bytes(range(256)) * 8


def _make_dmg(tmp_path):
    raw = tmp_path / "disk.img"
    raw.write_bytes(RAW)
    dmg = tmp_path / "disk.dmg"
    assert main(["dmg", str(raw), str(dmg)]) == 0
    return dmg


def test_usage_without_arguments(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_missing_source(tmp_path, capsys):
    missing = tmp_path / "missing.dmg"
    assert main(["iso", str(missing), str(tmp_path / "out.img")]) == 1
    assert "cannot open source" in capsys.readouterr().out


def test_dmg_then_iso_round_trip(tmp_path):
    dmg = _make_dmg(tmp_path)
    iso = tmp_path / "out.img"
    assert main(["iso", str(dmg), str(iso)]) == 0
    assert iso.read_bytes() == RAW


def test_extract_by_partition_number(tmp_path):
    dmg = _make_dmg(tmp_path)
    target = tmp_path / "part.img"
    assert main(["extract", str(dmg), str(target), "0"]) == 0
    assert target.read_bytes() == RAW


def test_extract_without_hfs_partition_fails(tmp_path, capsys):
    dmg = _make_dmg(tmp_path)
    assert main(["extract", str(dmg), str(tmp_path / "part.img")]) == 1
    assert "BLKX not found!" in capsys.readouterr().err


def test_key_option_rejected(tmp_path, capsys):
    dmg = _make_dmg(tmp_path)
    assert main(["extract", str(dmg), str(tmp_path / "x"), "-k", "placeholder"]) == 1
    assert "not supported" in capsys.readouterr().err