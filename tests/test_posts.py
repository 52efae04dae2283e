"""Tests for creating, reading, updating and deleting blog posts."""
from datetime import datetime, timedelta

import crud
import models


def create(client, title="Hi", content="Hello"):
    response = client.post("/blog", json={"post": {"title": title, "content": content}})
    assert response.status_code == 302
    return int(response.headers["location"].rsplit("/", 1)[1])


def get_post(db, post_id):
    db.expire_all()
    return db.query(models.Post).filter(models.Post.id == post_id).first()


class TestCreatePost:

    def test_register_then_create(self, alice, db):
        response = alice.post("/blog", json={"post": {"title": "Hi", "content": "Hello"}})
        assert response.status_code == 302
        post_id = int(response.headers["location"].rsplit("/", 1)[1])
        assert response.headers["location"] == f"/blog/{post_id}"

        post = get_post(db, post_id)
        assert post.author.username == "alice"

    def test_round_trip(self, alice):
        post_id = create(alice, title="Wari", content="Pilgrimage to Pandharpur")
        post = alice.get(f"/blog/{post_id}").json()["post"]
        assert post["title"] == "Wari"
        assert post["content"] == "Pilgrimage to Pandharpur"
        assert post["author"]["username"] == "alice"

    def test_create_from_form(self, alice, db):
        response = alice.post("/blog", data={"post[title]": "Form", "post[content]": "Body"})
        assert response.status_code == 302
        post_id = int(response.headers["location"].rsplit("/", 1)[1])
        assert get_post(db, post_id).title == "Form"

    def test_missing_post_object(self, alice):
        response = alice.post("/blog", json={"title": "Hi", "content": "Hello"})
        assert response.status_code == 400
        assert "Invalid post data" in response.text

    def test_empty_title(self, alice, db):
        response = alice.post("/blog", json={"post": {"title": "", "content": "Hello"}})
        assert response.status_code == 400
        assert "Title and content are required" in response.text
        assert db.query(models.Post).count() == 0

    def test_missing_content_in_form(self, alice):
        response = alice.post("/blog", data={"post[title]": "Hi"})
        assert response.status_code == 400
        assert "Title and content are required" in response.text


class TestReadPosts:

    def test_list_is_newest_first(self, alice, db):
        first = create(alice, title="First")
        second = create(alice, title="Second")
        db.get(models.Post, first).created_at = datetime.now() + timedelta(hours=1)
        db.commit()

        posts = alice.get("/blog").json()["posts"]
        assert [p["id"] for p in posts] == [first, second]
        assert posts[0]["author"]["username"] == "alice"

    def test_list_posts_orders_by_created_at(self, alice, db):
        ids = [create(alice, title=str(i)) for i in range(3)]
        assert [p.id for p in crud.list_posts(db)] == list(reversed(ids))

    def test_missing_post_is_404(self, alice):
        response = alice.get("/blog/9999")
        assert response.status_code == 404
        assert "Post not found" in response.text

    def test_malformed_id_is_400(self, alice):
        response = alice.get("/blog/not-an-id")
        assert response.status_code == 400
        assert "Invalid ID format" in response.text

    def test_other_users_can_read(self, alice, bob):
        post_id = create(alice)
        assert bob.get(f"/blog/{post_id}").status_code == 200


class TestEditPost:

    def test_author_gets_edit_form(self, alice):
        post_id = create(alice, title="Mine")
        response = alice.get(f"/blog/{post_id}/edit")
        assert response.status_code == 200
        assert response.json()["post"]["title"] == "Mine"

    def test_non_author_redirected_from_edit_form(self, alice, bob):
        post_id = create(alice)
        response = bob.get(f"/blog/{post_id}/edit")
        assert response.status_code == 302
        assert response.headers["location"] == "/blog"

    def test_author_updates(self, alice, db):
        post_id = create(alice)
        response = alice.put(f"/blog/{post_id}", json={"post": {"title": "New", "content": "Text"}})
        assert response.status_code == 302
        assert response.headers["location"] == f"/blog/{post_id}"
        post = get_post(db, post_id)
        assert (post.title, post.content) == ("New", "Text")

    def test_update_through_method_override(self, alice, db):
        post_id = create(alice)
        response = alice.post(f"/blog/{post_id}?_method=PUT",
                              data={"post[title]": "Edited", "post[content]": "Again"})
        assert response.status_code == 302
        assert get_post(db, post_id).title == "Edited"

    def test_update_validates_payload(self, alice, db):
        post_id = create(alice)
        response = alice.put(f"/blog/{post_id}", json={"post": {"title": "New"}})
        assert response.status_code == 400
        assert get_post(db, post_id).title == "Hi"

    def test_non_author_update_is_redirected(self, alice, bob, db):
        post_id = create(alice)
        response = bob.put(f"/blog/{post_id}", json={"post": {"title": "Hacked", "content": "x"}})
        assert response.status_code == 302
        assert response.headers["location"] == "/blog"
        post = get_post(db, post_id)
        assert (post.title, post.content) == ("Hi", "Hello")

    def test_update_missing_post_is_404(self, alice):
        response = alice.put("/blog/9999", json={"post": {"title": "a", "content": "b"}})
        assert response.status_code == 404


class TestDeletePost:

    def test_author_deletes(self, alice, db):
        post_id = create(alice)
        response = alice.delete(f"/blog/{post_id}")
        assert response.status_code == 302
        assert response.headers["location"] == "/blog"
        assert get_post(db, post_id) is None

    def test_delete_through_method_override(self, alice, db):
        post_id = create(alice)
        assert alice.post(f"/blog/{post_id}?_method=DELETE").status_code == 302
        assert get_post(db, post_id) is None

    def test_non_author_delete_is_redirected(self, alice, bob, db):
        post_id = create(alice)
        response = bob.delete(f"/blog/{post_id}")
        assert response.status_code == 302
        assert response.headers["location"] == "/blog"
        assert get_post(db, post_id) is not None
