"""Tests for the command line entry point."""

from epc_catalog.cli import main


class TestCheckCsv:
    def test_valid_file(self, csv_file, capsys):
        assert main(["check-csv", str(csv_file)]) == 0
        out = capsys.readouterr().out
        assert "2 part items" in out
        assert "PN1" in out

    def test_invalid_file(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text(
            "target_id,part_number,catalog_item_name_en,catalog_item_name_ch,quantity\n"
            "p1,,Bolt,螺栓,1\n",
            encoding="utf-8",
        )

        assert main(["check-csv", str(path)]) == 1
        assert "Row 1" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert main([]) == 1


class TestFileErrors:
    def test_missing_config_file(self, csv_file, tmp_path, capsys):
        missing = tmp_path / "nope.yaml"

        assert main(["--config", str(missing), "check-csv", str(csv_file)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_image(self, csv_file, tmp_path, capsys):
        argv = [
            "--base-url", "http://127.0.0.1:9/api",
            "create-document",
            "--name", "Cabin assembly",
            "--csv", str(csv_file),
            "--image", str(tmp_path / "nope.png"),
            "--master", "m1",
        ]

        assert main(argv) == 1
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "nope.png" in err
