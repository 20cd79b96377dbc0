import pytest

from jobboard.errors import NotAuthenticatedError, TransportError
from jobboard.favorites import FavoritesStore, InMemoryFavoritesBackend, PostgrestFavoritesBackend
from jobboard.postgrest import PostgrestClient

from helpers import FakeSession, make_response


class CountingBackend(InMemoryFavoritesBackend):
    def __init__(self):
        super().__init__()
        self.reads = 0

    def rows_for(self, user_id):
        self.reads += 1
        return super().rows_for(user_id)


@pytest.fixture
def backend():
    return CountingBackend()


@pytest.fixture
def store(backend):
    return FavoritesStore(backend)


def test_add_then_list(store, job):
    store.add("u1", job())
    favs = store.list("u1")
    assert len(favs) == 1
    assert favs[0].job_title == "Cariste"
    assert favs[0].job_location == "Liège"
    assert favs[0].user_id == "u1"
    assert store.is_favorited("u1", "https://www.randstad.be/jobs/1")
    assert not store.is_favorited("u2", "https://www.randstad.be/jobs/1")


def test_add_without_user_is_rejected_and_writes_nothing(store, backend, job):
    with pytest.raises(PermissionError):
        store.add(None, job())
    with pytest.raises(NotAuthenticatedError):
        store.add("", job())
    assert backend.rows == []


def test_add_twice_keeps_one_row(store, backend, job):
    store.add("u1", job())
    store.add("u1", job(title="Autre titre"))
    assert len(backend.rows) == 1


def test_remove_is_idempotent(store, backend, job):
    store.add("u1", job())
    store.remove("u1", job().link)
    store.remove("u1", job().link)
    store.remove("u1", "https://nowhere.test/")
    assert store.list("u1") == []


def test_remove_requires_user(store):
    with pytest.raises(NotAuthenticatedError):
        store.remove(None, "https://x.test/")


def test_list_is_cached_until_a_mutation(store, backend, job):
    store.list("u1")
    store.list("u1")
    assert backend.reads == 1

    store.add("u1", job())
    assert len(store.list("u1")) == 1
    assert backend.reads == 2

    store.remove("u1", job().link)
    assert store.list("u1") == []
    assert backend.reads == 3


def test_failed_mutation_still_invalidates_cache(store, backend, job):
    store.list("u1")

    def broken(row):
        backend.rows.append({"id": "x", **row})
        raise TransportError("timeout after write")

    backend.insert = broken
    with pytest.raises(TransportError):
        store.add("u1", job())
    assert store.is_favorited("u1", job().link)


def test_toggle(store, job):
    assert store.toggle("u1", job()) is True
    assert store.toggle("u1", job()) is False
    assert store.list("u1") == []


def test_list_without_user_is_empty(store):
    assert store.list(None) == []


def test_postgrest_backend_check_then_insert(job):
    session = FakeSession(
        make_response(body=[]),
        make_response(status=201, body=[{"id": 7, "user_id": "u1", "job_link": job().link}]),
    )
    client = PostgrestClient("https://proj.supabase.co", "anon", access_token="jwt", session=session)
    FavoritesStore(PostgrestFavoritesBackend(client)).add("u1", job())

    check, insert = session.calls
    assert check["method"] == "GET"
    assert check["params"]["user_id"] == "eq.u1"
    assert check["params"]["job_link"] == "eq." + job().link
    assert check["headers"]["Authorization"] == "Bearer jwt"
    assert check["headers"]["apikey"] == "anon"
    assert insert["method"] == "POST"
    assert insert["url"].endswith("/rest/v1/favorites")
    assert insert["json"] == {
        "user_id": "u1",
        "job_title": "Cariste",
        "job_location": "Liège",
        "job_link": job().link,
    }


def test_postgrest_backend_skips_insert_when_present(job):
    session = FakeSession(make_response(body=[{"id": 3}]))
    client = PostgrestClient("https://proj.supabase.co", "anon", session=session)
    FavoritesStore(PostgrestFavoritesBackend(client)).add("u1", job())
    assert len(session.calls) == 1


def test_postgrest_backend_delete_filters_by_user_and_link():
    session = FakeSession(make_response(status=204))
    client = PostgrestClient("https://proj.supabase.co", "anon", session=session)
    FavoritesStore(PostgrestFavoritesBackend(client)).remove("u1", "https://l.test/1")
    call = session.calls[0]
    assert call["method"] == "DELETE"
    assert call["params"] == {"user_id": "eq.u1", "job_link": "eq.https://l.test/1"}
