from import_snapshot import main


async def test_import_then_update(tmp_path, make_xlsx, capsys):
    database_url = f"sqlite:///{tmp_path / 'cli.db'}"
    creation = tmp_path / "100-2026-01-01-2026-01-10.xlsx"
    creation.write_bytes(make_xlsx([["1", "Alpha", 100, 1000, 0, 0, 5, 0]]))

    assert await main([str(creation), "--kind", "creation", "--database-url", database_url]) == 0
    assert "Done: 1" in capsys.readouterr().out

    mismatch = tmp_path / "101-2026-01-10-2026-01-20.xlsx"
    mismatch.write_bytes(make_xlsx([["1", "Alpha", 101, 1000, 0, 0, 50, 0]]))

    assert await main([str(mismatch), "--database-url", database_url]) == 2
    assert "Kingdom mismatch!" in capsys.readouterr().out

    assert await main([str(mismatch), "--force", "--database-url", database_url]) == 0


async def test_missing_file(tmp_path):
    assert await main([str(tmp_path / "nope.xlsx")]) == 1


async def test_unreadable_file(tmp_path, capsys):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"not a workbook")
    assert await main([str(bad), "--database-url", f"sqlite:///{tmp_path / 'cli.db'}"]) == 1
    assert "ERROR" in capsys.readouterr().out
