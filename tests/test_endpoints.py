"""
HTTP-level tests for every route, run against the in-memory database.
"""

from datetime import timedelta

from test_fixtures import (
    auth_headers,
    client,
    db_session,
    make_qr_token,
    make_recipe,
    recipe_payload,
)
from test_constants import DAIQUIRI, GUEST_REVIEW, NEGRONI, WHISKEY_SOUR
from domain.models import QrToken, Review


# =============================================================================
# HEALTH
# =============================================================================


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"message": "Server is running!"}


def test_health_check(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == "MyMixes"
    assert r.headers["X-Request-ID"]


# =============================================================================
# RECIPES
# =============================================================================


def test_create_whiskey_sour(client):
    """
    Admin POST /recipes with the canonical payload.

    Verifies:
    - 201 with the submitted title and slug
    - One ingredient named "whiskey"
    - camelCase keys in the body
    """
    r = client.post("/recipes", json=WHISKEY_SOUR, headers=auth_headers())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["title"] == "Whiskey Sour"
    assert body["slug"] == "whiskey-sour"
    assert [i["name"] for i in body["ingredients"]] == ["whiskey"]
    assert body["ingredients"][0]["type"]["name"] == "whiskey"
    assert "avgRating" in body
    assert "createdAt" in body


def test_create_recipe_requires_admin(client):
    r = client.post("/recipes", json=WHISKEY_SOUR)
    assert r.status_code == 401
    assert r.json() == {"error": "Access token required"}

    r = client.post("/recipes", json=WHISKEY_SOUR, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid token"}


def test_create_recipe_validation_errors(client):
    """
    Verifies:
    - Shape errors return 400 with a list of issues
    - An ingredient with neither typeId nor name is rejected
    """
    bad = recipe_payload(title="A", ingredients=[{"amount": "1 oz"}])
    r = client.post("/recipes", json=bad, headers=auth_headers())
    assert r.status_code == 400
    issues = r.json()["error"]
    assert isinstance(issues, list)
    paths = {issue["path"] for issue in issues}
    assert "title" in paths
    assert any("Provide either typeId or name" in issue["message"] for issue in issues)

    r = client.post("/recipes", json=recipe_payload(ingredients=[]), headers=auth_headers())
    assert r.status_code == 400


def test_create_recipe_rejects_non_url_safe_slug(client):
    for slug in ["Whiskey Sour", "whiskey_sour", "-sour", "sour--2"]:
        r = client.post("/recipes", json=recipe_payload(slug=slug), headers=auth_headers())
        assert r.status_code == 400, slug
        assert [issue["path"] for issue in r.json()["error"]] == ["slug"]

    r = client.post("/recipes", json=recipe_payload(slug="corpse-reviver-2"), headers=auth_headers())
    assert r.status_code == 201


def test_create_recipe_duplicate_slug(client):
    assert client.post("/recipes", json=WHISKEY_SOUR, headers=auth_headers()).status_code == 201

    r = client.post(
        "/recipes",
        json=recipe_payload(title="Whiskey Sour (house)"),
        headers=auth_headers(),
    )
    assert r.status_code == 409
    assert "error" in r.json()

    detail = client.get("/recipes/whiskey-sour").json()
    assert detail["title"] == "Whiskey Sour"


def test_list_recipes(client, db_session):
    make_recipe(db_session, NEGRONI)
    make_recipe(db_session, DAIQUIRI)

    r = client.get("/recipes")
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 2
    assert body["page"] == 1
    assert body["size"] == 12
    assert [i["slug"] for i in body["items"]] == ["daiquiri", "negroni"]
    assert body["items"][0]["_count"] == {"ingredients": 3, "reviews": 0}
    assert "ingredients" not in body["items"][0]

    r = client.get("/recipes", params={"query": "negr", "page": 1, "size": 5})
    assert [i["slug"] for i in r.json()["items"]] == ["negroni"]

    assert client.get("/recipes", params={"page": 0}).status_code == 400


def test_get_recipe_not_found(client):
    r = client.get("/recipes/unknown-drink")
    assert r.status_code == 404
    assert r.json() == {"error": "Recipe not found"}


def test_update_recipe_replaces_ingredients(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)
    payload = recipe_payload(
        NEGRONI,
        title="Boulevardier",
        slug="boulevardier",
        ingredients=[
            {"name": "Bourbon", "amount": "1 1/4 oz"},
            {"name": "campari", "amount": "1 oz"},
        ],
    )

    r = client.put(f"/recipes/{recipe.id}", json=payload, headers=auth_headers())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["slug"] == "boulevardier"
    assert [i["name"] for i in body["ingredients"]] == ["bourbon", "campari"]

    assert client.get("/recipes/negroni").status_code == 404
    assert client.put("/recipes/999", json=payload, headers=auth_headers()).status_code == 404


def test_delete_recipe(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)

    assert client.delete(f"/recipes/{recipe.id}").status_code == 401
    r = client.delete(f"/recipes/{recipe.id}", headers=auth_headers())
    assert r.status_code == 204
    assert client.get("/recipes/negroni").status_code == 404
    assert client.delete(f"/recipes/{recipe.id}", headers=auth_headers()).status_code == 404


# =============================================================================
# REVIEWS
# =============================================================================


def test_average_rating_scenario(client):
    """
    Verifies:
    - avgRating absent before reviews
    - 4 after one review of 4
    - 3 after a second review of 2
    """
    created = client.post("/recipes", json=WHISKEY_SOUR, headers=auth_headers()).json()
    assert client.get("/recipes/whiskey-sour").json()["avgRating"] in (None, 0)

    r = client.post(f"/recipes/{created['id']}/reviews", json={"rating": 4, "comment": "Lovely"})
    assert r.status_code == 201
    assert client.get("/recipes/whiskey-sour").json()["avgRating"] == 4

    client.post(f"/recipes/{created['id']}/reviews", json={"rating": 2, "comment": "Meh"})
    detail = client.get("/recipes/whiskey-sour").json()
    assert detail["avgRating"] == 3
    assert [rv["rating"] for rv in detail["reviews"]] == [2, 4]


def test_review_validation_and_listing(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)

    r = client.post(f"/recipes/{recipe.id}/reviews", json={"rating": 0, "comment": "x"})
    assert r.status_code == 400
    assert r.json()["error"][0]["path"] == "rating"

    assert client.post("/recipes/999/reviews", json={"rating": 3, "comment": "x"}).status_code == 404

    client.post(f"/recipes/{recipe.id}/reviews", json={"rating": 5, "comment": "Bold", "name": "Lu"})
    r = client.get(f"/recipes/{recipe.id}/reviews")
    assert r.status_code == 200
    assert [(rv["name"], rv["rating"]) for rv in r.json()] == [("Lu", 5)]
    assert client.get("/recipes/999/reviews").status_code == 404


def test_review_by_admin_defaults_name_to_role(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)
    r = client.post(
        f"/recipes/{recipe.id}/reviews",
        json={"rating": 4, "comment": "House favourite"},
        headers=auth_headers(),
    )
    assert r.status_code == 201
    assert r.json()["name"] == "admin"


# =============================================================================
# ANONYMOUS REVIEWS
# =============================================================================


def test_anonymous_review_with_valid_token(client, db_session):
    """
    Verifies:
    - 201 and the review is stored with the guest's name
    - The token is stamped used but still accepted afterwards
    """
    recipe = make_recipe(db_session, DAIQUIRI)
    qr_token = make_qr_token(db_session, recipe.id)

    r = client.post(
        f"/recipes/{recipe.id}/anonymous-reviews",
        params={"token": qr_token.token},
        json=GUEST_REVIEW,
    )
    assert r.status_code == 201, r.text
    assert r.json()["name"] == "Maria"
    assert r.json()["userId"] is None

    db_session.refresh(qr_token)
    assert qr_token.used is True

    again = client.post(
        f"/recipes/{recipe.id}/anonymous-reviews",
        params={"token": qr_token.token},
        json=dict(GUEST_REVIEW, rating=3),
    )
    assert again.status_code == 201
    assert client.get("/recipes/daiquiri").json()["avgRating"] == 4


def test_anonymous_review_token_in_body(client, db_session):
    recipe = make_recipe(db_session, DAIQUIRI)
    qr_token = make_qr_token(db_session, recipe.id)

    r = client.post(
        f"/recipes/{recipe.id}/anonymous-reviews",
        json=dict(GUEST_REVIEW, token=qr_token.token),
    )
    assert r.status_code == 201


def test_anonymous_review_expired_token(client, db_session):
    """
    Verifies:
    - Expired token is rejected with 403 and the uniform message
    - No review row is created
    """
    recipe = make_recipe(db_session, DAIQUIRI)
    qr_token = make_qr_token(db_session, recipe.id, expires_in=timedelta(seconds=-1))

    r = client.post(
        f"/recipes/{recipe.id}/anonymous-reviews",
        params={"token": qr_token.token},
        json=GUEST_REVIEW,
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Invalid or expired QR token"}
    assert db_session.query(Review).count() == 0


def test_anonymous_review_token_errors(client, db_session):
    daiquiri = make_recipe(db_session, DAIQUIRI)
    negroni = make_recipe(db_session, NEGRONI)
    qr_token = make_qr_token(db_session, daiquiri.id)

    r = client.post(f"/recipes/{daiquiri.id}/anonymous-reviews", json=GUEST_REVIEW)
    assert r.status_code == 400
    assert r.json() == {"error": "QR token is required"}

    r = client.post(
        f"/recipes/{daiquiri.id}/anonymous-reviews",
        params={"token": "0" * 64},
        json=GUEST_REVIEW,
    )
    assert r.status_code == 403

    # Token for another recipe
    r = client.post(
        f"/recipes/{negroni.id}/anonymous-reviews",
        params={"token": qr_token.token},
        json=GUEST_REVIEW,
    )
    assert r.status_code == 403
    assert db_session.query(Review).count() == 0


def test_anonymous_review_requires_name(client, db_session):
    recipe = make_recipe(db_session, DAIQUIRI)
    qr_token = make_qr_token(db_session, recipe.id)

    r = client.post(
        f"/recipes/{recipe.id}/anonymous-reviews",
        params={"token": qr_token.token},
        json={"rating": 5, "comment": "x" * 501},
    )
    assert r.status_code == 400
    paths = {issue["path"] for issue in r.json()["error"]}
    assert paths == {"name", "comment"}


# =============================================================================
# QR MANAGEMENT
# =============================================================================


def test_qr_generate_list_count_delete(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)

    r = client.post("/qr/generate", json={"recipeId": recipe.id}, headers=auth_headers())
    assert r.status_code == 201, r.text
    body = r.json()
    assert len(body["token"]) == 64
    assert body["qrUrl"] == f"http://localhost:5173/#/review/{recipe.id}?token={body['token']}"
    assert body["recipe"] == {"id": recipe.id, "title": "Negroni", "slug": "negroni"}
    assert body["used"] is False

    listed = client.get("/qr", headers=auth_headers()).json()
    assert [t["id"] for t in listed] == [body["id"]]
    assert client.get("/qr", params={"recipeId": recipe.id + 1}, headers=auth_headers()).json() == []

    counts = client.get("/qr/counts", headers=auth_headers()).json()
    assert counts == {str(recipe.id): 1}

    r = client.delete(f"/qr/{body['id']}", headers=auth_headers())
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "QR token deleted successfully"}
    assert db_session.query(QrToken).count() == 0

    r = client.delete(f"/qr/{body['id']}", headers=auth_headers())
    assert r.status_code == 404
    assert r.json() == {"error": "QR token not found"}


def test_qr_routes_require_admin(client, db_session):
    recipe = make_recipe(db_session, NEGRONI)
    assert client.post("/qr/generate", json={"recipeId": recipe.id}).status_code == 401
    assert client.get("/qr").status_code == 401
    assert client.get("/qr/counts").status_code == 401


def test_qr_generate_missing_recipe(client):
    r = client.post("/qr/generate", json={"recipeId": 999}, headers=auth_headers())
    assert r.status_code == 404


# =============================================================================
# AUTH
# =============================================================================


def test_login_and_verify(client):
    from conftest import ADMIN_PASSWORD

    r = client.post("/auth/login", json={"password": ADMIN_PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["user"] == {"role": "admin"}

    r = client.get("/auth/verify", headers=auth_headers(body["token"]))
    assert r.status_code == 200
    verify = r.json()
    assert verify["valid"] is True
    assert verify["user"]["role"] == "admin"
    assert verify["user"]["exp"] > verify["user"]["iat"]


def test_login_errors(client):
    r = client.post("/auth/login", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Password is required"}

    r = client.post("/auth/login", json={"password": "guess"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}

    assert client.get("/auth/verify").status_code == 401


# =============================================================================
# IMAGES
# =============================================================================


def test_upload_image(client):
    import io

    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), (10, 120, 90)).save(buffer, "PNG")

    r = client.post(
        "/images/upload",
        files={"image": ("lime.png", buffer.getvalue(), "image/png")},
        headers=auth_headers(),
    )
    assert r.status_code == 200, r.text
    image_url = r.json()["imageUrl"]
    assert r.json()["success"] is True

    # Served back from the static mount
    path = image_url.replace("http://testserver", "")
    served = client.get(path)
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/jpeg"


def test_upload_image_rejects_garbage(client):
    r = client.post(
        "/images/upload",
        files={"image": ("x.png", b"not an image", "image/png")},
        headers=auth_headers(),
    )
    assert r.status_code == 400
    assert client.post("/images/upload", files={"image": ("x.png", b"x", "image/png")}).status_code == 401
