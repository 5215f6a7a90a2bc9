"""
NoteShare Backend — API Tests
===============================

End-to-end through the FastAPI app with httpx ASGITransport, an in-memory
database and a temporary blob store.
"""

from uuid import uuid4

import pytest


def _auth(make_token, principal):
    return {"Authorization": f"Bearer {make_token(principal)}"}


def _note_form(taxonomy, **overrides):
    form = {
        "title": "Calc I midterm",
        "subject_id": str(taxonomy.calculus.id),
        "professor_id": str(taxonomy.rossi.id),
        "year": "2024",
        "mode": "text",
        "content": "Limits, derivatives",
    }
    form.update(overrides)
    return form


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_without_auth(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["storage"] == "writable"


class TestAuthEndpoints:
    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.get("/api/notes")

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_me(self, test_client, make_token, alice):
        response = await test_client.get("/api/auth/me", headers=_auth(make_token, alice))

        assert response.status_code == 200
        assert response.json()["id"] == str(alice.id)

    @pytest.mark.asyncio
    async def test_sign_out_revokes_token(self, test_client, make_token, alice):
        headers = _auth(make_token, alice)

        response = await test_client.post("/api/auth/sign-out", headers=headers)
        assert response.status_code == 204

        response = await test_client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401


class TestTaxonomyEndpoints:
    @pytest.mark.asyncio
    async def test_quick_add_returns_selected_entry_last(
        self, test_client, make_token, alice, taxonomy
    ):
        response = await test_client.post(
            "/api/taxonomy/subjects",
            json={"name": "  Analysis "},
            headers=_auth(make_token, alice),
        )

        assert response.status_code == 201
        body = response.json()
        assert [s["name"] for s in body["subjects"]] == ["Algebra", "Calculus", "Analysis"]
        assert body["selected_subject_id"] == body["subjects"][-1]["id"]

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, test_client, make_token, alice, taxonomy):
        response = await test_client.post(
            "/api/taxonomy/professors",
            json={"name": "   "},
            headers=_auth(make_token, alice),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

        listing = await test_client.get("/api/taxonomy", headers=_auth(make_token, alice))
        assert [p["name"] for p in listing.json()["professors"]] == ["Rossi"]


class TestNoteEndpoints:
    @pytest.mark.asyncio
    async def test_text_note_lifecycle(self, test_client, make_token, alice, bob, taxonomy):
        created = await test_client.post(
            "/api/notes", data=_note_form(taxonomy), headers=_auth(make_token, alice)
        )
        assert created.status_code == 201
        note = created.json()
        assert note["file_type"] == "text"
        assert note["file_path"] is None

        listing = await test_client.get(
            "/api/notes", params={"search": "calc"}, headers=_auth(make_token, bob)
        )
        assert listing.status_code == 200
        assert listing.headers["X-Total-Count"] == "1"
        assert listing.json()["notes"][0]["author_name"] == "alice"

        forbidden = await test_client.delete(
            f"/api/notes/{note['id']}", headers=_auth(make_token, bob)
        )
        assert forbidden.status_code == 403

        deleted = await test_client.delete(
            f"/api/notes/{note['id']}", headers=_auth(make_token, alice)
        )
        assert deleted.status_code == 204

        gone = await test_client.get(f"/api/notes/{note['id']}", headers=_auth(make_token, alice))
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_filter_by_subject(self, test_client, make_token, alice, taxonomy):
        headers = _auth(make_token, alice)
        await test_client.post("/api/notes", data=_note_form(taxonomy), headers=headers)
        await test_client.post(
            "/api/notes",
            data=_note_form(taxonomy, title="Rings", subject_id=str(taxonomy.algebra.id)),
            headers=headers,
        )

        response = await test_client.get(
            "/api/notes", params={"subject_id": str(taxonomy.algebra.id)}, headers=headers
        )

        assert [n["title"] for n in response.json()["notes"]] == ["Rings"]

        response = await test_client.get(
            "/api/notes", params={"subject_id": str(taxonomy.algebra.id).upper()}, headers=headers
        )

        assert [n["title"] for n in response.json()["notes"]] == ["Rings"]

    @pytest.mark.asyncio
    async def test_file_mode_without_file_is_400(self, test_client, make_token, alice, taxonomy):
        response = await test_client.post(
            "/api/notes",
            data=_note_form(taxonomy, mode="file", content=""),
            headers=_auth(make_token, alice),
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "file"

    @pytest.mark.asyncio
    async def test_upload_download_and_rate(
        self, test_client, make_token, alice, bob, taxonomy, sample_pdf_bytes
    ):
        created = await test_client.post(
            "/api/notes",
            data=_note_form(taxonomy, title="Exam solutions", mode="file", content=""),
            files={"file": ("notes.pdf", sample_pdf_bytes, "application/pdf")},
            headers=_auth(make_token, alice),
        )
        assert created.status_code == 201
        note = created.json()
        assert note["file_type"] == "pdf"
        assert note["content"] is None

        download = await test_client.get(
            f"/api/notes/{note['id']}/download", headers=_auth(make_token, bob)
        )
        assert download.status_code == 200
        assert download.content == sample_pdf_bytes
        assert "Exam%20solutions.pdf" in download.headers["content-disposition"]

        rated = await test_client.put(
            f"/api/notes/{note['id']}/rating",
            json={"stars": 5, "comment": "Lifesaver"},
            headers=_auth(make_token, bob),
        )
        assert rated.status_code == 200
        detail = rated.json()
        assert detail["note"]["download_count"] == 1
        assert detail["note"]["average_rating"] == 5.0
        assert detail["my_rating"] == {"stars": 5, "comment": "Lifesaver"}
        assert detail["ratings"][0]["username"] == "bob"

    @pytest.mark.asyncio
    async def test_text_note_download_is_400(self, test_client, make_token, alice, taxonomy):
        headers = _auth(make_token, alice)
        created = await test_client.post("/api/notes", data=_note_form(taxonomy), headers=headers)

        response = await test_client.get(
            f"/api/notes/{created.json()['id']}/download", headers=headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rating_out_of_range_is_400(self, test_client, make_token, alice, taxonomy):
        headers = _auth(make_token, alice)
        created = await test_client.post("/api/notes", data=_note_form(taxonomy), headers=headers)

        response = await test_client.put(
            f"/api/notes/{created.json()['id']}/rating",
            json={"stars": 7},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "stars"

    @pytest.mark.asyncio
    async def test_unknown_note_detail_is_404(self, test_client, make_token, alice):
        response = await test_client.get(f"/api/notes/{uuid4()}", headers=_auth(make_token, alice))

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_rating_unknown_note_is_404(self, test_client, make_token, alice):
        response = await test_client.put(
            f"/api/notes/{uuid4()}/rating",
            json={"stars": 4},
            headers=_auth(make_token, alice),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
