import os

import pytest

from readme_footer.config import load_config, load_env_file
from readme_footer.errors import ConfigError
from readme_footer.footer import DEFAULT_FOOTER, FOOTER_MARKER_ID
from readme_footer.models import Repository

BASE_ENV = {
    "GITHUB_TOKEN": "ghp_test",
    "ORG": "acme",
    "UPDATE_BRANCH_NAME": "readme-footer-update",
}


def env(**overrides):
    values = dict(BASE_ENV)
    values.update(overrides)
    return {k: v for k, v in values.items() if v is not None}


def test_defaults():
    config = load_config(env())

    assert config.github_token == "ghp_test"
    assert config.organization == "acme"
    assert config.update_branch_name == "readme-footer-update"
    assert config.override_repositories == []
    assert config.base_branch == "develop"
    assert config.readme_path == "README.md"
    assert config.footer_html == DEFAULT_FOOTER
    assert config.footer_marker_id == FOOTER_MARKER_ID
    assert config.failed_repositories_file == "failed-repositories.json"


@pytest.mark.parametrize("name", ["GITHUB_TOKEN", "UPDATE_BRANCH_NAME", "ORG"])
def test_missing_required_value(name):
    with pytest.raises(ConfigError, match=name):
        load_config(env(**{name: None}))


def test_blank_value_counts_as_missing():
    with pytest.raises(ConfigError, match="GITHUB_TOKEN"):
        load_config(env(GITHUB_TOKEN="  "))


def test_override_repositories_replace_organization():
    config = load_config(env(ORG=None, OVERRIDE_REPOS='[{"owner": "acme", "repository": "widgets"}]'))

    assert config.organization is None
    assert config.override_repositories == [Repository("acme", "widgets")]


@pytest.mark.parametrize("raw", ["not json", '{"owner": "acme"}', '["acme/widgets"]'])
def test_malformed_override_repositories(raw):
    with pytest.raises(ConfigError, match="OVERRIDE_REPOS"):
        load_config(env(OVERRIDE_REPOS=raw))


def test_footer_from_file(tmp_path):
    footer_file = tmp_path / "footer.html"
    footer_file.write_text("<p>file footer</p>\n")

    assert load_config(env(FOOTER_FILE=str(footer_file))).footer_html == "<p>file footer</p>"


def test_footer_file_argument_wins(tmp_path):
    footer_file = tmp_path / "footer.html"
    footer_file.write_text("<p>argument footer</p>")

    config = load_config(env(FOOTER_HTML="<p>inline</p>"), footer_file=str(footer_file))

    assert config.footer_html == "<p>argument footer</p>"


def test_inline_footer():
    assert load_config(env(FOOTER_HTML="<p>inline</p>")).footer_html == "<p>inline</p>"


def test_missing_footer_file(tmp_path):
    with pytest.raises(ConfigError, match="footer file"):
        load_config(env(FOOTER_FILE=str(tmp_path / "nope.html")))


def test_base_branch_argument():
    config = load_config(env(BASE_BRANCH="main"), base_branch="release")

    assert config.base_branch == "release"


def test_update_branch_must_differ_from_base():
    with pytest.raises(ConfigError, match="UPDATE_BRANCH_NAME"):
        load_config(env(UPDATE_BRANCH_NAME="develop"))


def test_env_file_is_loaded(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("ORG=from-file\n")
    monkeypatch.delenv("ORG", raising=False)

    assert load_env_file(str(env_file)) is True
    assert os.environ["ORG"] == "from-file"


def test_missing_env_file(tmp_path):
    with pytest.raises(ConfigError):
        load_env_file(str(tmp_path / "missing.env"))
