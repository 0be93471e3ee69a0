import base64
import json

import pytest
import urllib3

import commit_rewrite as cr
from commit_rewrite.config import EMPTY_TREE_SHA
from commit_rewrite.github import read_token
from commit_rewrite.objects import TreeEntry

OLD = "a" * 40
NEW = "b" * 40
OTHER = "c" * 40


class FakeResponse:
    def __init__(self, status, data=None):
        self.status = status
        self.data = json.dumps(data).encode() if data is not None else b""


class FakePool:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, body=None, headers=None, retries=None):
        self.requests.append(
            {"method": method, "url": url, "json": json.loads(body) if body else None, "retries": retries}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_store(*responses):
    pool = FakePool(*responses)
    client = cr.GitHubClient("tok", api_url="https://ghe.example.com/api/v3/", pool=pool)
    return cr.GitHubObjectStore(client, "octo/repo"), pool


def ref(sha):
    return FakeResponse(200, {"ref": "refs/heads/main", "object": {"type": "commit", "sha": sha}})


def commit(sha, parents):
    return FakeResponse(
        200,
        {"sha": sha, "tree": {"sha": "t" * 40}, "parents": [{"sha": p} for p in parents], "message": "m"},
    )


def test_read_token_from_env(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "from-env")
    assert read_token() == "from-env"


def test_read_token_from_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("# comment\nOTHER=1\nGITHUB_TOKEN='from-file'\n")
    assert read_token() == "from-file"


def test_read_token_missing(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(cr.InvalidInput):
        read_token()


def test_client_sends_auth_and_builds_urls():
    store, pool = make_store(ref(OLD))
    assert store.get_branch_tip("feature/x") == OLD
    request = pool.requests[0]
    assert request["url"] == "https://ghe.example.com/api/v3/repos/octo/repo/git/ref/heads/feature/x"
    assert store.client.headers["Authorization"] == "Bearer tok"


def test_get_requests_retry_and_writes_do_not():
    store, pool = make_store(ref(OLD), FakeResponse(201, {"sha": NEW}))
    store.get_branch_tip("main")
    store.create_blob(b"x")
    assert isinstance(pool.requests[0]["retries"], urllib3.util.Retry)
    assert pool.requests[1]["retries"] is False


def test_missing_branch():
    store, _ = make_store(FakeResponse(404, {"message": "Not Found"}))
    with pytest.raises(cr.RemoteNotFound):
        store.get_branch_tip("main")


def test_get_commit_and_tree():
    tree_response = FakeResponse(
        200,
        {"sha": "t" * 40, "tree": [{"path": "src", "mode": "040000", "type": "tree", "sha": OTHER}]},
    )
    store, _ = make_store(commit(NEW, [OLD]), tree_response)
    c = store.get_commit(NEW)
    assert (c.sha, c.tree, c.parents, c.message) == (NEW, "t" * 40, [OLD], "m")
    assert store.get_tree("t" * 40) == [TreeEntry("src", "040000", "tree", OTHER)]


def test_create_blob_sends_base64():
    store, pool = make_store(FakeResponse(201, {"sha": NEW}))
    assert store.create_blob(b"\x00binary") == NEW
    payload = pool.requests[0]["json"]
    assert payload["encoding"] == "base64"
    assert base64.b64decode(payload["content"]) == b"\x00binary"


def test_create_blob_too_large():
    store, _ = make_store(FakeResponse(422, {"message": "content is too large"}))
    with pytest.raises(cr.ContentTooLarge):
        store.create_blob(b"x")


def test_empty_tree_needs_no_request():
    store, pool = make_store()
    assert store.create_tree([]) == EMPTY_TREE_SHA
    assert store.get_tree(EMPTY_TREE_SHA) == []
    assert pool.requests == []


def test_create_tree_with_stale_object():
    store, _ = make_store(FakeResponse(422, {"message": "tree.sha is not a valid blob"}))
    with pytest.raises(cr.RemoteNotFound):
        store.create_tree([TreeEntry("a", "100644", "blob", OTHER)])


def test_create_commit_payload():
    store, pool = make_store(FakeResponse(201, {"sha": NEW}))
    sha = store.create_commit([OLD], "t" * 40, "msg", author={"name": "A", "email": "a@x"})
    assert sha == NEW
    assert pool.requests[0]["json"] == {
        "message": "msg",
        "tree": "t" * 40,
        "parents": [OLD],
        "author": {"name": "A", "email": "a@x"},
    }


def test_update_ref_fast_forward_is_not_forced():
    store, pool = make_store(ref(OLD), commit(NEW, [OLD]), FakeResponse(200, {}))
    store.update_ref("main", OLD, NEW)
    patch = pool.requests[-1]
    assert patch["method"] == "PATCH"
    assert patch["url"].endswith("/repos/octo/repo/git/refs/heads/main")
    assert patch["json"] == {"sha": NEW, "force": False}


def test_update_ref_rewrite_is_forced():
    store, pool = make_store(ref(OLD), commit(NEW, [OTHER]), FakeResponse(200, {}))
    store.update_ref("main", OLD, NEW)
    assert pool.requests[-1]["json"] == {"sha": NEW, "force": True}


def test_update_ref_detects_moved_branch_without_patching():
    store, pool = make_store(ref(OTHER))
    with pytest.raises(cr.Conflict) as excinfo:
        store.update_ref("main", OLD, NEW)
    assert excinfo.value.actual == OTHER
    assert [r["method"] for r in pool.requests] == ["GET"]


def test_update_ref_rejected_fast_forward_is_conflict():
    store, _ = make_store(
        ref(OLD), commit(NEW, [OLD]), FakeResponse(422, {"message": "Update is not a fast forward"})
    )
    with pytest.raises(cr.Conflict):
        store.update_ref("main", OLD, NEW)


def test_update_ref_protected_branch_is_forbidden():
    store, _ = make_store(
        ref(OLD), commit(NEW, [OLD]), FakeResponse(422, {"message": "Protected branch update failed"})
    )
    with pytest.raises(cr.Forbidden):
        store.update_ref("main", OLD, NEW)


@pytest.mark.parametrize(
    "status, message, error",
    [
        (401, "Bad credentials", cr.Forbidden),
        (403, "Resource not accessible by integration", cr.Forbidden),
        (403, "API rate limit exceeded", cr.Transient),
        (502, "Bad Gateway", cr.Transient),
        (404, "Not Found", cr.RemoteNotFound),
    ],
)
def test_status_mapping(status, message, error):
    store, _ = make_store(FakeResponse(status, {"message": message}))
    with pytest.raises(error) as excinfo:
        store.get_commit(NEW)
    assert message in str(excinfo.value)


def test_transport_errors_are_transient():
    store, _ = make_store(urllib3.exceptions.ProtocolError("connection reset"))
    with pytest.raises(cr.Transient):
        store.get_branch_tip("main")


@pytest.mark.parametrize("repo", ["", "octo", "octo/", "a/b/c"])
def test_store_requires_owner_and_name(repo):
    with pytest.raises(cr.InvalidInput):
        cr.GitHubObjectStore(object(), repo)
