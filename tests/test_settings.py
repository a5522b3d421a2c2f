import settings


def test_lga_files_parsed():
    assert settings._load_lga_files('{"Ikeja": "ikeja.pdf", "Surulere": "gdrive:1AbC"}') == \
        {"Ikeja": "ikeja.pdf", "Surulere": "gdrive:1AbC"}


def test_lga_files_empty_string():
    assert settings._load_lga_files("") == {}


def test_lga_files_invalid_json(caplog):
    with caplog.at_level("WARNING", logger="settings"):
        assert settings._load_lga_files("{Ikeja: ikeja.pdf") == {}
    assert "not valid JSON" in caplog.text


def test_lga_files_must_be_an_object(caplog):
    with caplog.at_level("WARNING", logger="settings"):
        assert settings._load_lga_files("[1]") == {}
    assert "JSON object" in caplog.text
