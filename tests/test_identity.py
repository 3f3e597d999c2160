from __future__ import annotations

import pytest

from stencil.errors import InvalidIdentityError
from stencil.identity import resolve_identity


@pytest.mark.parametrize("token", ["acme/cool-lib", "com.example/widget", "io.github.jane/tool"])
def test_qualified_token_is_preserved(token):
    identity = resolve_identity(token)
    qualifier, name = token.split("/")
    assert identity.name == token
    assert identity.main == name
    assert identity.artifact_id == name
    assert identity.scm_repo == name
    assert identity.qualifier == qualifier


@pytest.mark.parametrize("token", ["demo", "my-app", "x"])
def test_unqualified_token_is_doubled(token):
    identity = resolve_identity(token)
    assert identity.name == f"{token}/{token}"
    assert identity.main == token
    assert identity.top == token


def test_group_id_for_plain_qualifier_uses_prefix():
    assert resolve_identity("acme/cool-lib").group_id == "net.clojars.acme"
    assert resolve_identity("acme/cool-lib", group_prefix="io.local.").group_id == "io.local.acme"


def test_group_id_keeps_dotted_qualifier():
    assert resolve_identity("com.example/widget").group_id == "com.example"


def test_plain_qualifier_defaults():
    identity = resolve_identity("acme/cool-lib")
    assert identity.top == "acme"
    assert identity.scm_host == "github.com"
    assert identity.scm_user == "acme"


def test_git_hosted_qualifier_extracts_organization():
    identity = resolve_identity("io.github.jane/tool")
    assert identity.top == "jane"
    assert identity.scm_user == "jane"
    assert identity.scm_host == "github.com"
    assert identity.group_id == "io.github.jane"


def test_gitlab_and_sourcehut_hosts():
    assert resolve_identity("com.gitlab.team/app").scm_host == "gitlab.com"
    sourcehut = resolve_identity("ht.sr.someone/thing")
    assert sourcehut.top == "someone"
    assert sourcehut.scm_host == "git.sr.ht"


def test_scm_user_strips_reverse_domain_prefix():
    assert resolve_identity("com.example/widget").scm_user == "example"
    assert resolve_identity("org.corfield/new").scm_user == "corfield"
    assert resolve_identity("net.acme/new").scm_user == "net.acme"


def test_custom_url_lookup():
    identity = resolve_identity("acme/thing", resolve_url=lambda _: "https://git.example.org/acme/thing.git")
    assert identity.scm_host == "git.example.org"


def test_context_keys():
    context = resolve_identity("acme/cool-lib").context()
    assert context == {
        "artifact/id": "cool-lib",
        "group/id": "net.clojars.acme",
        "main": "cool-lib",
        "name": "acme/cool-lib",
        "scm/domain": "github.com",
        "scm/user": "acme",
        "scm/repo": "cool-lib",
        "top": "acme",
    }


@pytest.mark.parametrize("token", ["", "   ", "/name", "acme/", "a/b/c", "has space/x", "bad|pipe", 'q"uote/x'])
def test_invalid_tokens_raise(token):
    with pytest.raises(InvalidIdentityError):
        resolve_identity(token)
