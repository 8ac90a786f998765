"""
SnipShare — Snippet Route Tests
================================

What:  The public board, the profile page, and the owner-only flows,
       exercised end to end over HTTP.

What we test:
    ✅ Anonymous visitors can browse but not create (404)
    ✅ Create → flash → listed on the index and the owner's profile
    ✅ Index previews are truncated; the full view is not
    ✅ Snippet content is HTML-escaped
    ✅ Owner-only routes: 404 anonymous, 403 for another user
    ✅ Update and delete, including the owned-id list after delete
"""

import uuid

import pytest


async def create(client, title, code="print('hello')"):
    response = await client.post("/create", data={"title": title, "code_content": code})
    assert response.status_code == 303, response.text
    return response


class TestPublicPages:

    @pytest.mark.asyncio
    async def test_empty_index(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert "No snippets yet." in response.text

    @pytest.mark.asyncio
    async def test_header_for_anonymous_visitor(self, test_client):
        response = await test_client.get("/")
        assert 'href="/login"' in response.text
        assert 'action="/logout"' not in response.text

    @pytest.mark.asyncio
    async def test_unknown_route_renders_404(self, test_client):
        response = await test_client.get("/no/such/page")
        assert response.status_code == 404
        assert "Not found" in response.text

    @pytest.mark.asyncio
    async def test_full_view_unknown_and_malformed_ids(self, test_client):
        assert (await test_client.get(f"/{uuid.uuid4()}/snippetfullview")).status_code == 404
        assert (await test_client.get("/not-a-uuid/snippetfullview")).status_code == 404


class TestCreate:

    @pytest.mark.asyncio
    async def test_anonymous_cannot_create(self, test_client, find_snippet):
        assert (await test_client.get("/new")).status_code == 404

        response = await test_client.post(
            "/create", data={"title": "Sneaky", "code_content": "x"}
        )
        assert response.status_code == 404
        assert await find_snippet("Sneaky") is None

    @pytest.mark.asyncio
    async def test_create_flow(self, test_client, signup, find_user, find_snippet):
        await signup(test_client, "alice_dev")

        assert (await test_client.get("/new")).status_code == 200
        response = await create(test_client, "Hello world")
        assert response.headers["location"] == "/"

        index = await test_client.get("/")
        assert "Saved successfully." in index.text
        assert "Hello world" in index.text

        snippet = await find_snippet("Hello world")
        user = await find_user("alice_dev")
        assert user.snippet_ids == [snippet.id]

    @pytest.mark.asyncio
    async def test_blank_title_rerenders_form(self, test_client, signup):
        await signup(test_client, "alice_dev")

        response = await test_client.post(
            "/create", data={"title": "  ", "code_content": "keep_me()"}
        )
        assert response.status_code == 400
        assert "Title is required." in response.text
        assert "keep_me()" in response.text


class TestRendering:

    @pytest.mark.asyncio
    async def test_index_preview_truncated_full_view_complete(
        self, test_client, signup, find_snippet
    ):
        await signup(test_client, "alice_dev")
        code = "a" * 150 + "TAIL"
        await create(test_client, "Long one", code)
        snippet = await find_snippet("Long one")

        index = await test_client.get("/")
        assert "a" * 150 + "[...]" in index.text
        assert "TAIL" not in index.text

        full = await test_client.get(f"/{snippet.id}/snippetfullview")
        assert full.status_code == 200
        assert code in full.text

    @pytest.mark.asyncio
    async def test_short_code_not_truncated(self, test_client, signup):
        await signup(test_client, "alice_dev")
        await create(test_client, "Short one", "b" * 149)

        index = await test_client.get("/")
        assert "b" * 149 in index.text
        assert "[...]" not in index.text

    @pytest.mark.asyncio
    async def test_content_is_escaped(self, test_client, signup, find_snippet):
        await signup(test_client, "alice_dev")
        await create(test_client, "<b>bold</b>", "<script>alert(1)</script>")
        snippet = await find_snippet("<b>bold</b>")

        full = await test_client.get(f"/{snippet.id}/snippetfullview")
        assert "<script>alert(1)</script>" not in full.text
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in full.text
        assert "&lt;b&gt;bold&lt;/b&gt;" in full.text

    @pytest.mark.asyncio
    async def test_security_headers(self, test_client):
        response = await test_client.get("/")
        assert "script-src 'self'" in response.headers["content-security-policy"]
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-request-id"]


class TestProfile:

    @pytest.mark.asyncio
    async def test_anonymous_profile_is_404(self, test_client):
        assert (await test_client.get("/profile")).status_code == 404

    @pytest.mark.asyncio
    async def test_profile_lists_only_own_snippets(self, test_client, other_client, signup):
        await signup(test_client, "alice_dev")
        await signup(other_client, "bob_the_dev")
        await create(test_client, "Alice snippet")
        await create(other_client, "Bob snippet")

        profile = await test_client.get("/profile")
        assert "Alice snippet" in profile.text
        assert "Bob snippet" not in profile.text

        index = await test_client.get("/")
        assert "Alice snippet" in index.text
        assert "Bob snippet" in index.text


class TestOwnerOnlyRoutes:

    @pytest.mark.asyncio
    async def test_owner_can_open_edit_and_remove(self, test_client, signup, find_snippet):
        await signup(test_client, "alice_dev")
        await create(test_client, "Mine", "mine()")
        snippet = await find_snippet("Mine")

        edit = await test_client.get(f"/{snippet.id}/edit")
        assert edit.status_code == 200
        assert 'value="Mine"' in edit.text
        assert "mine()" in edit.text

        remove = await test_client.get(f"/{snippet.id}/remove")
        assert remove.status_code == 200
        assert f'action="/{snippet.id}/delete"' in remove.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,suffix", [
        ("get", "edit"),
        ("post", "update"),
        ("get", "remove"),
        ("post", "delete"),
    ])
    async def test_anonymous_gets_404(
        self, test_client, other_client, signup, find_snippet, method, suffix
    ):
        await signup(other_client, "bob_the_dev")
        await create(other_client, "Bob's")
        snippet = await find_snippet("Bob's")

        response = await getattr(test_client, method)(f"/{snippet.id}/{suffix}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,suffix", [
        ("get", "edit"),
        ("post", "update"),
        ("get", "remove"),
        ("post", "delete"),
    ])
    async def test_other_user_gets_403(
        self, test_client, other_client, signup, find_snippet, method, suffix
    ):
        await signup(test_client, "alice_dev")
        await signup(other_client, "bob_the_dev")
        await create(other_client, "Bob's", "original()")
        snippet = await find_snippet("Bob's")

        if method == "post":
            response = await test_client.post(
                f"/{snippet.id}/{suffix}",
                data={"title": "Hijacked", "code_content": "evil()"},
            )
        else:
            response = await test_client.get(f"/{snippet.id}/{suffix}")
        assert response.status_code == 403

        stored = await find_snippet("Bob's")
        assert stored is not None
        assert stored.code_content == "original()"

    @pytest.mark.asyncio
    async def test_malformed_id_when_logged_in_is_403(self, test_client, signup):
        await signup(test_client, "alice_dev")
        assert (await test_client.get("/not-a-uuid/edit")).status_code == 403


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_update(self, test_client, signup, find_snippet):
        await signup(test_client, "alice_dev")
        await create(test_client, "Before", "old()")
        snippet = await find_snippet("Before")

        response = await test_client.post(
            f"/{snippet.id}/update", data={"title": "After", "code_content": "new()"}
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/"

        index = await test_client.get("/")
        assert "The snippet was updated successfully." in index.text

        updated = await find_snippet("After")
        assert updated is not None and updated.id == snippet.id
        assert updated.code_content == "new()"

    @pytest.mark.asyncio
    async def test_invalid_update_rerenders_edit_form(self, test_client, signup, find_snippet):
        await signup(test_client, "alice_dev")
        await create(test_client, "Before", "old()")
        snippet = await find_snippet("Before")

        response = await test_client.post(
            f"/{snippet.id}/update", data={"title": "After", "code_content": ""}
        )
        assert response.status_code == 400
        assert "Code content is required." in response.text
        assert (await find_snippet("Before")) is not None

    @pytest.mark.asyncio
    async def test_delete_removes_snippet_and_owned_id(
        self, test_client, signup, find_snippet, find_user
    ):
        await signup(test_client, "alice_dev")
        await create(test_client, "Keep")
        await create(test_client, "Doomed")
        keep = await find_snippet("Keep")
        doomed = await find_snippet("Doomed")

        response = await test_client.post(f"/{doomed.id}/delete")
        assert response.status_code == 303
        assert response.headers["location"] == "/"

        index = await test_client.get("/")
        assert "The snippet was deleted successfully." in index.text
        assert "Doomed" not in index.text

        assert await find_snippet("Doomed") is None
        assert (await test_client.get(f"/{doomed.id}/snippetfullview")).status_code == 404
        user = await find_user("alice_dev")
        assert user.snippet_ids == [keep.id]

        # No longer owned, so a second delete is refused
        assert (await test_client.post(f"/{doomed.id}/delete")).status_code == 403
