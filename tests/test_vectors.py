"""Tests for the vector database resources."""

import json

import httpx
import pytest

from gravixlayer import GravixLayerBadRequestError, GravixLayerError
from gravixlayer.models.vectors import VectorMetric

INDEXES_URL = "https://api.gravixlayer.test/v1/vector-db/indexes"
VECTORS_URL = "https://api.gravixlayer.test/v1/vectors/idx-1"

INDEX = {
    "id": "idx-1",
    "name": "docs",
    "dimension": 3,
    "metric": "cosine",
    "vector_type": "dense",
    "delete_protection": False,
    "created_at": "2024-01-01T00:00:00Z",
}

STORED = {
    "id": "vec-1",
    "embedding": [0.1, 0.2, 0.3],
    "metadata": {"source": "a.txt"},
    "delete_protection": False,
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}


@pytest.fixture
def vectors(client):
    return client.vectors.index("idx-1")


def _json(route):
    return json.loads(route.calls.last.request.content)


class TestVectorIndexes:
    """Tests for client.vectors.indexes."""

    def test_create(self, client, mock_api):
        route = mock_api.post(INDEXES_URL).mock(
            return_value=httpx.Response(200, json=INDEX)
        )

        index = client.vectors.indexes.create(
            name="docs", dimension=3, metric=VectorMetric.COSINE, metadata={"a": 1}
        )

        assert index.id == "idx-1"
        assert _json(route) == {
            "name": "docs",
            "dimension": 3,
            "metric": "cosine",
            "vector_type": "dense",
            "metadata": {"a": 1},
            "delete_protection": False,
        }

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"name": "", "dimension": 3, "metric": "cosine"}, "Index name"),
            ({"name": "d", "dimension": 0, "metric": "cosine"}, "Dimension"),
            ({"name": "d", "dimension": True, "metric": "cosine"}, "Dimension"),
            ({"name": "d", "dimension": 3, "metric": "manhattan"}, "metric"),
            (
                {"name": "d", "dimension": 3, "metric": "cosine", "vector_type": "x"},
                "vector type",
            ),
        ],
    )
    def test_create_validation(self, client, mock_api, kwargs, message):
        with pytest.raises(GravixLayerBadRequestError, match=message):
            client.vectors.indexes.create(**kwargs)
        assert not mock_api.calls

    def test_list(self, client, mock_api):
        mock_api.get(INDEXES_URL).mock(
            return_value=httpx.Response(
                200, json={"indexes": [INDEX], "pagination": {"total": 1}}
            )
        )

        result = client.vectors.indexes.list()

        assert result.indexes[0].name == "docs"
        assert result.pagination == {"total": 1}

    def test_get(self, client, mock_api):
        mock_api.get(f"{INDEXES_URL}/idx-1").mock(
            return_value=httpx.Response(200, json=INDEX)
        )
        assert client.vectors.indexes.get("idx-1").dimension == 3

    def test_get_requires_id(self, client):
        with pytest.raises(GravixLayerBadRequestError, match="Index ID is required"):
            client.vectors.indexes.get("")

    def test_update(self, client, mock_api):
        route = mock_api.patch(f"{INDEXES_URL}/idx-1").mock(
            return_value=httpx.Response(200, json={**INDEX, "delete_protection": True})
        )

        index = client.vectors.indexes.update("idx-1", delete_protection=True)

        assert index.delete_protection is True
        assert _json(route) == {"delete_protection": True}

    def test_delete(self, client, mock_api):
        route = mock_api.delete(f"{INDEXES_URL}/idx-1").mock(
            return_value=httpx.Response(200, json={"message": "deleted"})
        )

        client.vectors.indexes.delete("idx-1")

        assert route.called


class TestVectorUpsert:
    """Tests for single and batch upserts."""

    def test_upsert_reads_back(self, vectors, mock_api, no_sleep):
        upsert = mock_api.post(f"{VECTORS_URL}/upsert").mock(
            return_value=httpx.Response(200, json={"ids": ["vec-1"], "count": 1})
        )
        mock_api.get(f"{VECTORS_URL}/vec-1").mock(
            return_value=httpx.Response(200, json=STORED)
        )

        vector = vectors.upsert([0.1, 0.2, 0.3], id="vec-1", metadata={"source": "a"})

        assert vector.created_at == STORED["created_at"]
        assert _json(upsert) == {
            "vectors": [
                {
                    "id": "vec-1",
                    "embedding": [0.1, 0.2, 0.3],
                    "metadata": {"source": "a"},
                    "delete_protection": False,
                }
            ]
        }
        no_sleep.assert_called_once_with(0.1)

    def test_upsert_falls_back_when_read_back_fails(self, vectors, mock_api, no_sleep):
        mock_api.post(f"{VECTORS_URL}/upsert").mock(
            return_value=httpx.Response(200, json={"ids": ["vec-9"], "count": 1})
        )
        mock_api.get(f"{VECTORS_URL}/vec-9").mock(
            return_value=httpx.Response(404, text="not indexed yet")
        )

        vector = vectors.upsert([1.0, 2.0, 3.0])

        assert vector.id == "vec-9"
        assert vector.embedding == [1.0, 2.0, 3.0]
        assert vector.metadata == {}
        assert vector.created_at

    def test_upsert_reports_server_error(self, vectors, mock_api, no_sleep):
        mock_api.post(f"{VECTORS_URL}/upsert").mock(
            return_value=httpx.Response(200, json={"ids": [], "error": "bad dim"})
        )

        with pytest.raises(GravixLayerError, match="Vector upsert failed: bad dim"):
            vectors.upsert([1.0])

    def test_upsert_unexpected_response(self, vectors, mock_api, no_sleep):
        mock_api.post(f"{VECTORS_URL}/upsert").mock(
            return_value=httpx.Response(200, json={})
        )

        with pytest.raises(GravixLayerError, match="Unexpected response format"):
            vectors.upsert([1.0])

    def test_upsert_text(self, vectors, mock_api, no_sleep):
        route = mock_api.post(f"{VECTORS_URL}/text/upsert").mock(
            return_value=httpx.Response(
                200,
                json={
                    "ids": ["vec-1"],
                    "count": 1,
                    "usage": {"prompt_tokens": 2, "total_tokens": 2},
                },
            )
        )
        mock_api.get(f"{VECTORS_URL}/vec-1").mock(
            return_value=httpx.Response(200, json=STORED)
        )

        vector = vectors.upsert_text("hello", model="embed")

        assert vector.text == "hello"
        assert vector.model == "embed"
        assert vector.embedding == STORED["embedding"]
        assert vector.usage == {"prompt_tokens": 2, "total_tokens": 2}
        assert _json(route)["vectors"][0]["text"] == "hello"

    def test_upsert_text_fallback(self, vectors, mock_api, no_sleep):
        mock_api.post(f"{VECTORS_URL}/text/upsert").mock(
            return_value=httpx.Response(200, json={"ids": ["vec-2"], "count": 1})
        )
        mock_api.get(f"{VECTORS_URL}/vec-2").mock(return_value=httpx.Response(404))

        vector = vectors.upsert_text("hello", model="embed")

        assert vector.embedding == []
        assert vector.usage == {"prompt_tokens": 0, "total_tokens": 0}

    def test_batch_upsert(self, vectors, mock_api):
        route = mock_api.post(f"{VECTORS_URL}/batch").mock(
            return_value=httpx.Response(200, json={"upserted_count": 2})
        )

        result = vectors.batch_upsert(
            [{"embedding": [1.0, 2.0, 3.0]}, {"embedding": [4.0, 5.0, 6.0]}]
        )

        assert result.upserted_count == 2
        assert result.failed_count == 0
        assert len(_json(route)["vectors"]) == 2

    def test_batch_upsert_text(self, vectors, mock_api):
        mock_api.post(f"{VECTORS_URL}/text/batch").mock(
            return_value=httpx.Response(
                200, json={"upserted_count": 1, "failed_count": 1, "errors": ["x"]}
            )
        )

        result = vectors.batch_upsert_text([{"text": "a", "model": "m"}, {}])

        assert result.errors == ["x"]


class TestVectorOperations:
    """Tests for get, update, delete, listing and search."""

    def test_update_with_full_response(self, vectors, mock_api):
        route = mock_api.put(f"{VECTORS_URL}/vec-1").mock(
            return_value=httpx.Response(200, json=STORED)
        )

        vector = vectors.update("vec-1", metadata={"source": "b"})

        assert vector.id == "vec-1"
        assert _json(route) == {"metadata": {"source": "b"}}

    def test_update_refetches_partial_response(self, vectors, mock_api):
        mock_api.put(f"{VECTORS_URL}/vec-1").mock(
            return_value=httpx.Response(200, json={"id": "vec-1"})
        )
        get = mock_api.get(f"{VECTORS_URL}/vec-1").mock(
            return_value=httpx.Response(200, json=STORED)
        )

        vector = vectors.update("vec-1", delete_protection=True)

        assert get.called
        assert vector.embedding == STORED["embedding"]

    def test_update_requires_a_field(self, vectors):
        with pytest.raises(GravixLayerBadRequestError, match="At least one field"):
            vectors.update("vec-1")

    def test_delete(self, vectors, mock_api):
        route = mock_api.post(f"{VECTORS_URL}/delete").mock(
            return_value=httpx.Response(200, json={})
        )

        assert vectors.delete("vec-1") is None
        assert _json(route) == {"vector_ids": ["vec-1"]}

    def test_batch_delete(self, vectors, mock_api):
        mock_api.post(f"{VECTORS_URL}/delete").mock(
            return_value=httpx.Response(200, json={"deleted_count": 2})
        )
        assert vectors.batch_delete(["a", "b"]) == {"deleted_count": 2}

    def test_batch_delete_requires_ids(self, vectors):
        with pytest.raises(GravixLayerBadRequestError, match="At least one vector ID"):
            vectors.batch_delete([])

    def test_list_ids(self, vectors, mock_api):
        mock_api.get(f"{VECTORS_URL}/list").mock(
            return_value=httpx.Response(200, json={"vectors": [{"id": "vec-1"}]})
        )
        assert vectors.list_ids().vectors == [{"id": "vec-1"}]

    def test_list_from_array(self, vectors, mock_api):
        route = mock_api.get(f"{VECTORS_URL}/fetch").mock(
            return_value=httpx.Response(
                200, json={"vectors": [{"id": "vec-1", "embedding": [1.0]}]}
            )
        )

        result = vectors.list(["vec-1", "vec-2"])

        vector = result.vectors["vec-1"]
        assert vector.delete_protection is False
        assert vector.created_at == ""
        assert route.calls.last.request.url.params["vector_ids"] == "vec-1,vec-2"

    def test_list_from_mapping(self, vectors, mock_api):
        mock_api.get(f"{VECTORS_URL}/fetch").mock(
            return_value=httpx.Response(
                200, json={"vectors": {"vec-1": {"embedding": []}}}
            )
        )

        result = vectors.list()

        assert result.vectors["vec-1"].id == "vec-1"

    def test_search(self, vectors, mock_api):
        route = mock_api.post(f"{VECTORS_URL}/search").mock(
            return_value=httpx.Response(
                200,
                json={
                    "hits": [{"id": "vec-1", "score": 0.98, "metadata": {"a": 1}}],
                    "query_time_ms": 3.5,
                },
            )
        )

        result = vectors.search([0.1, 0.2, 0.3], top_k=5, filter={"a": 1})

        assert result.hits[0].score == 0.98
        assert result.query_time_ms == 3.5
        assert _json(route)["top_k"] == 5

    @pytest.mark.parametrize("top_k", [0, 1001])
    def test_search_top_k_bounds(self, vectors, top_k):
        with pytest.raises(GravixLayerBadRequestError, match="top_k"):
            vectors.search([0.1], top_k=top_k)

    def test_search_text(self, vectors, mock_api):
        route = mock_api.post(f"{VECTORS_URL}/search/text").mock(
            return_value=httpx.Response(
                200, json={"hits": [], "usage": {"total_tokens": 3}}
            )
        )

        result = vectors.search_text("query", model="embed", top_k=1)

        assert result.usage == {"total_tokens": 3}
        assert _json(route)["query"] == "query"

    def test_index_requires_id(self, client):
        with pytest.raises(GravixLayerBadRequestError):
            client.vectors.index("")
