"""Tests for the documents service."""

import pytest
from fastapi.testclient import TestClient

from aria.db import documents as documents_db
from aria.errors import StorageError
from aria.main import app


@pytest.fixture
def client(fake_supabase):
    return TestClient(app)


def test_storage_path_is_sanitised():
    path = documents_db.build_storage_path("user-1", "Q3 report (final).pdf")

    prefix, name = path.split("/")
    assert prefix == "user-1"
    assert name.endswith("_Q3_report__final_.pdf")


def test_failed_row_insert_removes_stored_object(fake_supabase):
    fake_supabase.fail_tables.add("documents")

    with pytest.raises(StorageError):
        documents_db.upload_document("user-1", "notes.txt", b"hello", content_type="text/plain")

    assert fake_supabase.storage.objects == {}


def test_upload_keeps_image_metadata_columns(fake_supabase):
    document = documents_db.upload_document(
        "user-1",
        "photo.jpg",
        b"jpeg",
        content_type="image/jpeg",
        metadata={"width": 640, "height": 480, "meta": {"Make": "Canon"}},
    )

    assert document["width"] == 640
    assert "meta" not in document


def test_folders_list_first_then_by_name(fake_supabase):
    fake_supabase.seed(
        "documents",
        {"user_id": "user-1", "file_name": "b.txt", "is_folder": False, "parent_folder_id": None},
        {"user_id": "user-1", "file_name": "Zeta", "is_folder": True, "parent_folder_id": None},
        {"user_id": "user-1", "file_name": "a.txt", "is_folder": False, "parent_folder_id": None},
        {"user_id": "user-1", "file_name": "Alpha", "is_folder": True, "parent_folder_id": None},
        {"user_id": "user-1", "file_name": "nested.txt", "is_folder": False, "parent_folder_id": "f-1"},
        {"user_id": "user-2", "file_name": "other.txt", "is_folder": False, "parent_folder_id": None},
    )

    root = documents_db.list_documents("user-1")
    nested = documents_db.list_documents("user-1", folder_id="f-1")

    assert [d["file_name"] for d in root] == ["Alpha", "Zeta", "a.txt", "b.txt"]
    assert [d["file_name"] for d in nested] == ["nested.txt"]


def test_first_version_defaults_to_one(fake_supabase):
    assert documents_db.next_version("doc-1") == 1

    fake_supabase.rpc_handlers["next_version"] = lambda params: 4
    assert documents_db.next_version("doc-1") == 4
    assert fake_supabase.rpc_calls[-1] == ("next_version", {"doc_id": "doc-1"})


def test_activity_logging_is_best_effort(fake_supabase):
    fake_supabase.fail_tables.add("document_activity")

    documents_db.log_activity("doc-1", "user-1", "upload")

    assert "document_activity" not in fake_supabase.tables


def test_create_folder_route(client, fake_supabase):
    response = client.post("/documents/folders", json={"user_id": "user-1", "name": "Contracts"})

    assert response.status_code == 200
    folder = response.json()
    assert folder["is_folder"] is True
    assert folder["file_type"] == "folder"
    assert fake_supabase.tables["document_activity"][0]["action"] == "create_folder"


def test_create_version_route(client, fake_supabase):
    (document,) = fake_supabase.seed("documents", {"user_id": "user-1", "file_name": "msa.pdf"})
    fake_supabase.rpc_handlers["next_version"] = lambda params: 2

    response = client.post(
        f"/documents/{document['id']}/versions",
        json={
            "user_id": "user-1",
            "title": "MSA v2",
            "storage_path": "user-1/msa_v2.pdf",
            "size_bytes": 2048,
            "mime_type": "application/pdf",
        },
    )

    assert response.status_code == 200
    assert response.json()["version"] == 2
    (activity,) = fake_supabase.tables["document_activity"]
    assert activity["action"] == "new_version"
    assert activity["details"] == {"version": 2}


def test_create_version_requires_owner(client, fake_supabase):
    (document,) = fake_supabase.seed("documents", {"user_id": "user-1", "file_name": "msa.pdf"})

    response = client.post(
        f"/documents/{document['id']}/versions",
        json={"user_id": "user-2", "title": "x", "storage_path": "p", "size_bytes": 1, "mime_type": "text/plain"},
    )

    assert response.status_code == 404
    assert "document_versions" not in fake_supabase.tables


def test_activity_route_newest_first(client, fake_supabase):
    (document,) = fake_supabase.seed("documents", {"user_id": "user-1", "file_name": "msa.pdf"})
    fake_supabase.seed(
        "document_activity",
        {"document_id": document["id"], "action": "upload", "created_at": "2024-01-01T00:00:00+00:00"},
        {"document_id": document["id"], "action": "new_version", "created_at": "2024-02-01T00:00:00+00:00"},
        {"document_id": "other", "action": "upload", "created_at": "2024-03-01T00:00:00+00:00"},
    )

    response = client.get(f"/documents/{document['id']}/activity", params={"user_id": "user-1"})

    assert [a["action"] for a in response.json()["activity"]] == ["new_version", "upload"]


def test_activity_route_requires_owner(client, fake_supabase):
    (document,) = fake_supabase.seed("documents", {"user_id": "user-1", "file_name": "msa.pdf"})
    fake_supabase.seed("document_activity", {"document_id": document["id"], "action": "upload"})

    response = client.get(f"/documents/{document['id']}/activity", params={"user_id": "user-2"})

    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"
