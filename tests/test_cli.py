import json

import pytest
from conftest import RETAIL_URL, DummyResponse, ScriptedSession, price_row

from skufinder import catalog as catalog_module
from skufinder import cli
from skufinder.config import Credentials


@pytest.fixture
def offline(monkeypatch, settings):
    session = ScriptedSession(
        {
            RETAIL_URL: {
                "Items": [
                    price_row("Standard_D2s_v3", 0.1),
                    price_row("Standard_D4s_v3", 0.2),
                    price_row("Standard_E8s_v5", 0.5),
                ],
                "NextPageLink": None,
            }
        }
    )
    monkeypatch.setattr(cli, "load_settings", lambda: settings)
    monkeypatch.setattr(catalog_module, "make_session", lambda http: session)
    monkeypatch.setattr(catalog_module, "load_credentials", lambda: Credentials())
    return session


def _last_line(out):
    return out.strip().splitlines()[-1]


def test_build_writes_artifacts(offline, settings, capsys):
    assert cli.main(["build", "--region", "westeurope"]) == 0
    summary = json.loads(_last_line(capsys.readouterr().out))
    assert summary == {"changed": True, "records": 3, "from_cache": False, "degraded": True}

    data = json.loads(settings.run.json_path.read_text(encoding="utf-8"))
    assert [r["name"] for r in data] == ["Standard_D2s_v3", "Standard_D4s_v3", "Standard_E8s_v5"]
    assert settings.run.csv_path.read_text(encoding="utf-8").startswith("name,family,size,tier,region,inferred")
    assert "Total SKUs: **3**" in settings.run.report_path.read_text(encoding="utf-8")

    assert cli.main(["build"]) == 0
    summary = json.loads(_last_line(capsys.readouterr().out))
    assert summary["from_cache"] is True


def test_build_fails_when_prices_unavailable(offline, settings):
    offline.pages[RETAIL_URL] = DummyResponse({}, status_code=500)
    assert cli.main(["build", "--force-refresh"]) == 1
    assert not settings.run.json_path.exists()


def test_browse_prints_filtered_page(offline, capsys):
    assert cli.main(["browse", "--min-cpu", "4", "--sort", "PricePerHour", "--desc"]) == 0
    out = capsys.readouterr().out
    assert "Standard_D2s_v3" not in out
    assert out.index("Standard_E8s_v5") < out.index("Standard_D4s_v3")
    assert "page 1 / 1 (2 SKUs)" in out


def test_browse_reports_load_failure(offline, capsys):
    offline.pages[RETAIL_URL] = DummyResponse({}, status_code=500)
    assert cli.main(["browse", "--force-refresh"]) == 1
    assert "Failed to load SKUs for this region." in capsys.readouterr().out
