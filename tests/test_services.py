"""
Tests for the service layer with real database operations.

This test suite validates business logic in services with actual database:
- RecipeService: catalog CRUD, ingredient resolution, slug conflicts
- ReviewService: review insert and cached average rating
- QrService: token issue, validation window, housekeeping
- AuthService: password check and token round trip
- ImageService: upload validation and re-encoding

Tests use real database sessions to ensure:
- Service logic works correctly end-to-end
- Transaction management works
- Error handling is correct
"""

import io
import itertools
import uuid
import warnings
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy.exc import SAWarning
from sqlalchemy.orm import Session

from test_fixtures import db_session, make_recipe, make_qr_token, recipe_payload
from test_constants import WHISKEY_SOUR, NEGRONI, DAIQUIRI
from conftest import ADMIN_PASSWORD
from app.config import settings
from app.exceptions import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    UnauthorizedError,
)
from domain.models import IngredientType, QrToken, Recipe, Review, utcnow
from domain.schemas import RecipeCreate
from services import (
    AuthService,
    ImageService,
    QrService,
    RecipeService,
    ReviewService,
    TokenExpiredError,
    TokenInvalidError,
)
from services.qr_service import add_years


# =============================================================================
# RECIPE SERVICE TESTS
# =============================================================================


def test_recipe_service_create_whiskey_sour(db_session: Session):
    """
    Test RecipeService.create_recipe() with the canonical example.

    Verifies:
    - Title and slug are stored as given
    - Exactly one ingredient named "whiskey"
    - No reviews and no average yet
    """
    recipe = RecipeService.create_recipe(db_session, RecipeCreate.model_validate(WHISKEY_SOUR))

    assert recipe.id is not None
    assert recipe.title == "Whiskey Sour"
    assert recipe.slug == "whiskey-sour"
    assert [i.name for i in recipe.ingredients] == ["whiskey"]
    assert recipe.ingredients[0].amount == "2 oz"
    assert recipe.reviews == []
    assert recipe.avg_rating is None


def test_recipe_service_create_normalizes_ingredient_names(db_session: Session):
    recipe = make_recipe(db_session, DAIQUIRI)

    assert len(recipe.ingredients) == len(DAIQUIRI["ingredients"])
    assert [i.name for i in recipe.ingredients] == [
        i["name"].strip().lower() for i in DAIQUIRI["ingredients"]
    ]


def test_recipe_service_reuses_ingredient_types(db_session: Session):
    """
    Verifies:
    - Two recipes naming "Gin" share one IngredientType row
    - A typeId reference resolves to the existing type
    """
    negroni = make_recipe(db_session, NEGRONI)
    gin_type_id = next(i.type_id for i in negroni.ingredients if i.name == "gin")

    martini = make_recipe(
        db_session,
        title="Martini",
        slug="martini",
        method="Stir and strain into a chilled glass.",
        ingredients=[
            {"typeId": gin_type_id, "amount": "2 1/2 oz"},
            {"name": "GIN ", "amount": "dash"},
            {"name": "dry vermouth", "amount": "1/2 oz"},
        ],
    )

    assert [i.type_id for i in martini.ingredients][:2] == [gin_type_id, gin_type_id]
    assert db_session.query(IngredientType).filter(IngredientType.name == "gin").count() == 1


def test_recipe_service_create_unknown_type_id(db_session: Session):
    data = RecipeCreate.model_validate(
        recipe_payload(ingredients=[{"typeId": 999, "amount": "1 oz"}])
    )
    with pytest.raises(ServiceValidationError):
        RecipeService.create_recipe(db_session, data)

    assert db_session.query(Recipe).count() == 0


def test_recipe_service_new_types_stage_cleanly(db_session: Session):
    """
    Verifies:
    - Creating and replacing with several new ingredient names raises no SAWarning
    - Each line ends up linked to its own type
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error", SAWarning)
        recipe = make_recipe(db_session, NEGRONI)
        updated = RecipeService.update_recipe(
            db_session,
            recipe.id,
            RecipeCreate.model_validate(
                recipe_payload(
                    NEGRONI,
                    ingredients=[
                        {"name": "Rye Whiskey", "amount": "1 1/4 oz"},
                        {"name": "Campari", "amount": "1 oz"},
                        {"name": "Punt e Mes", "amount": "1 oz"},
                    ],
                )
            ),
        )

    assert [i.name for i in updated.ingredients] == ["rye whiskey", "campari", "punt e mes"]


def test_recipe_service_duplicate_slug_conflict(db_session: Session):
    """
    Verifies:
    - Second recipe with an existing slug raises ConflictError
    - The first recipe is not overwritten
    """
    make_recipe(db_session, WHISKEY_SOUR)

    with pytest.raises(ConflictError):
        make_recipe(db_session, WHISKEY_SOUR, title="Whiskey Sour!", method="Build it")

    stored = RecipeService.get_by_slug(db_session, "whiskey-sour")
    assert stored.title == "Whiskey Sour"
    assert stored.method == "Shake and strain"
    assert db_session.query(Recipe).count() == 1


def test_recipe_service_update_replaces_ingredients(db_session: Session):
    """
    Test update(update(r, A), B).ingredients == B.

    Verifies:
    - Each update leaves exactly the submitted ingredient set
    - Ingredient ids change even when content is the same
    """
    recipe = make_recipe(db_session, NEGRONI)
    set_a = [{"name": "gin", "amount": "1 oz"}, {"name": "aperol", "amount": "1 oz"}]
    set_b = [{"name": "bourbon", "amount": "1 1/4 oz"}]

    after_a = RecipeService.update_recipe(
        db_session, recipe.id, RecipeCreate.model_validate(recipe_payload(NEGRONI, ingredients=set_a))
    )
    assert [(i.name, i.amount) for i in after_a.ingredients] == [("gin", "1 oz"), ("aperol", "1 oz")]

    after_b = RecipeService.update_recipe(
        db_session,
        recipe.id,
        RecipeCreate.model_validate(recipe_payload(NEGRONI, title="Boulevardier", ingredients=set_b)),
    )
    assert [(i.name, i.amount) for i in after_b.ingredients] == [("bourbon", "1 1/4 oz")]
    assert after_b.title == "Boulevardier"

    again = RecipeService.update_recipe(
        db_session,
        recipe.id,
        RecipeCreate.model_validate(recipe_payload(NEGRONI, title="Boulevardier", ingredients=set_b)),
    )
    assert again.ingredients[0].id != after_b.ingredients[0].id


def test_recipe_service_update_slug_conflict(db_session: Session):
    make_recipe(db_session, NEGRONI)
    daiquiri = make_recipe(db_session, DAIQUIRI)

    with pytest.raises(ConflictError):
        RecipeService.update_recipe(
            db_session, daiquiri.id, RecipeCreate.model_validate(recipe_payload(DAIQUIRI, slug="negroni"))
        )

    # Keeping its own slug is fine
    updated = RecipeService.update_recipe(
        db_session, daiquiri.id, RecipeCreate.model_validate(recipe_payload(DAIQUIRI, title="Hemingway"))
    )
    assert updated.slug == "daiquiri"


def test_recipe_service_update_and_delete_missing(db_session: Session):
    with pytest.raises(NotFoundError):
        RecipeService.update_recipe(db_session, 404, RecipeCreate.model_validate(WHISKEY_SOUR))
    with pytest.raises(NotFoundError):
        RecipeService.delete_recipe(db_session, 404)


def test_recipe_service_get_by_slug_limits_reviews(db_session: Session):
    """
    Verifies:
    - Detail embeds at most 25 reviews, newest first
    """
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    now = utcnow()
    for n in range(30):
        db_session.add(
            Review(
                recipe_id=recipe.id,
                rating=3,
                comment=f"review {n}",
                created_at=now + timedelta(seconds=n),
            )
        )
    db_session.commit()

    detail = RecipeService.get_by_slug(db_session, "whiskey-sour")
    assert len(detail.reviews) == 25
    assert detail.reviews[0].comment == "review 29"

    with pytest.raises(NotFoundError):
        RecipeService.get_by_slug(db_session, "missing")


def test_recipe_service_list_paginates(db_session: Session):
    for n in range(5):
        make_recipe(db_session, WHISKEY_SOUR, title=f"Sour {n}", slug=f"sour-{n}")

    page = RecipeService.list_recipes(db_session, page=2, size=2)
    assert page.total == 5
    assert page.page == 2
    assert page.size == 2
    assert [r.slug for r in page.items] == ["sour-2", "sour-1"]
    assert page.items[0].counts.ingredients == 1

    filtered = RecipeService.list_recipes(db_session, query="  SOUR 4 ")
    assert [r.slug for r in filtered.items] == ["sour-4"]

    with pytest.raises(ServiceValidationError):
        RecipeService.list_recipes(db_session, page=0)


def test_recipe_service_delete(db_session: Session):
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    RecipeService.delete_recipe(db_session, recipe.id)

    with pytest.raises(NotFoundError):
        RecipeService.get_by_slug(db_session, "whiskey-sour")


# =============================================================================
# REVIEW SERVICE TESTS
# =============================================================================


def test_review_service_average_rating_scenario(db_session: Session):
    """
    Verifies:
    - No reviews: avg_rating absent
    - One review of 4: avg 4
    - Another review of 2: avg 3
    """
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    assert RecipeService.get_by_slug(db_session, "whiskey-sour").avg_rating is None

    ReviewService.create_review(db_session, recipe.id, rating=4, comment="Tart")
    assert RecipeService.get_by_slug(db_session, "whiskey-sour").avg_rating == 4

    ReviewService.create_review(db_session, recipe.id, rating=2, comment="Too sour")
    assert RecipeService.get_by_slug(db_session, "whiskey-sour").avg_rating == 3


def test_review_service_average_is_order_independent(db_session: Session):
    ratings = [5, 1, 4]
    averages = []
    for n, order in enumerate(itertools.permutations(ratings)):
        recipe = make_recipe(db_session, WHISKEY_SOUR, slug=f"sour-{n}")
        for rating in order:
            ReviewService.create_review(db_session, recipe.id, rating=rating, comment="ok")
        averages.append(RecipeService.get_recipe(db_session, recipe.id).avg_rating)

    assert len(averages) == 6
    assert all(avg == pytest.approx(10 / 3) for avg in averages)


def test_review_service_validation_and_missing_recipe(db_session: Session):
    recipe = make_recipe(db_session, WHISKEY_SOUR)

    with pytest.raises(ServiceValidationError):
        ReviewService.create_review(db_session, recipe.id, rating=6, comment="too good")
    with pytest.raises(NotFoundError):
        ReviewService.create_review(db_session, 999, rating=3, comment="ghost")
    with pytest.raises(NotFoundError):
        ReviewService.list_reviews(db_session, 999)

    assert db_session.query(Review).count() == 0


def test_review_service_list_newest_first(db_session: Session):
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    first = ReviewService.create_review(db_session, recipe.id, rating=3, comment="first", name="Ana")
    second = ReviewService.create_review(db_session, recipe.id, rating=5, comment="second")

    reviews = ReviewService.list_reviews(db_session, recipe.id)
    assert [r.id for r in reviews] == [second.id, first.id]
    assert reviews[1].name == "Ana"


# =============================================================================
# QR SERVICE TESTS
# =============================================================================


def test_qr_service_generate_token(db_session: Session):
    """
    Verifies:
    - Token is 64 hex characters (32 random bytes)
    - Expiry is one year after creation
    - Token starts unused
    """
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    qr_token = QrService.generate_token(db_session, recipe.id, now=now)

    assert len(qr_token.token) == 64
    int(qr_token.token, 16)
    assert qr_token.expires_at.replace(tzinfo=timezone.utc) == datetime(
        2026, 3, 1, 12, 0, tzinfo=timezone.utc
    )
    assert qr_token.used is False

    with pytest.raises(NotFoundError):
        QrService.generate_token(db_session, 999)


def test_qr_service_add_years_leap_day():
    leap = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert add_years(leap, 1) == datetime(2025, 2, 28, tzinfo=timezone.utc)


def test_qr_service_build_review_url():
    url = QrService.build_review_url(7, "abc")
    assert url == f"{settings.frontend_url}/#/review/7?token=abc"


def test_qr_service_validate_window(db_session: Session):
    """
    Test the token validity rule: valid iff now < expires_at and recipe exists.

    Verifies:
    - Valid before expiry, with the recipe id exposed
    - Invalid exactly at and after expiry
    - Unknown or empty tokens are invalid
    """
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    qr_token = QrService.generate_token(db_session, recipe.id)
    expires_at = qr_token.expires_at.replace(tzinfo=timezone.utc)

    before = QrService.validate_token(db_session, qr_token.token, now=expires_at - timedelta(seconds=1))
    assert before.valid is True
    assert before.recipe_id == recipe.id

    assert QrService.validate_token(db_session, qr_token.token, now=expires_at).valid is False
    assert (
        QrService.validate_token(db_session, qr_token.token, now=expires_at + timedelta(days=1)).valid
        is False
    )
    assert QrService.validate_token(db_session, "deadbeef").valid is False
    assert QrService.validate_token(db_session, "").valid is False


def test_qr_service_validate_after_recipe_deleted(db_session: Session):
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    qr_token = QrService.generate_token(db_session, recipe.id)
    token = qr_token.token

    RecipeService.delete_recipe(db_session, recipe.id)
    db_session.expire_all()

    assert QrService.validate_token(db_session, token).valid is False
    assert db_session.query(QrToken).count() == 0


def test_qr_service_mark_used_keeps_token_valid(db_session: Session):
    recipe = make_recipe(db_session, WHISKEY_SOUR)
    qr_token = make_qr_token(db_session, recipe.id)

    QrService.mark_used(db_session, qr_token.token)
    db_session.refresh(qr_token)

    assert qr_token.used is True
    assert qr_token.used_at is not None
    assert QrService.validate_token(db_session, qr_token.token).valid is True


def test_qr_service_housekeeping(db_session: Session):
    negroni = make_recipe(db_session, NEGRONI)
    daiquiri = make_recipe(db_session, DAIQUIRI)
    keep = make_qr_token(db_session, negroni.id)
    make_qr_token(db_session, daiquiri.id)
    make_qr_token(db_session, daiquiri.id, expires_in=timedelta(seconds=-5))

    assert QrService.counts_by_recipe(db_session) == {negroni.id: 1, daiquiri.id: 1}
    assert [t.id for t in QrService.list_active(db_session, recipe_id=negroni.id)] == [keep.id]

    QrService.delete_token(db_session, keep.id)
    assert QrService.counts_by_recipe(db_session) == {daiquiri.id: 1}

    with pytest.raises(NotFoundError):
        QrService.delete_token(db_session, uuid.uuid4())


# =============================================================================
# AUTH SERVICE TESTS
# =============================================================================


def test_auth_service_login_success():
    response = AuthService.login(ADMIN_PASSWORD)

    assert response.user.role == "admin"
    claims = AuthService.decode_token(response.token)
    assert claims.role == "admin"
    assert claims.exp - claims.iat == settings.jwt_expire_hours * 3600


def test_auth_service_login_failures():
    with pytest.raises(ServiceValidationError):
        AuthService.login("")
    with pytest.raises(ServiceValidationError):
        AuthService.login(None)
    with pytest.raises(UnauthorizedError):
        AuthService.login("wrong-password")
    with pytest.raises(UnauthorizedError):
        AuthService.login("x" * 100)


def test_auth_service_login_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "admin_password_hash", None)
    with pytest.raises(ConfigurationError):
        AuthService.login(ADMIN_PASSWORD)


def test_auth_service_decode_errors():
    expired = AuthService.create_access_token(
        now=utcnow() - timedelta(hours=48), expires_delta=timedelta(hours=1)
    )
    with pytest.raises(TokenExpiredError):
        AuthService.decode_token(expired)

    with pytest.raises(TokenInvalidError):
        AuthService.decode_token("not-a-jwt")

    token = AuthService.create_access_token()
    tampered = token[:-2] + ("aa" if not token.endswith("aa") else "bb")
    with pytest.raises(TokenInvalidError):
        AuthService.decode_token(tampered)


def test_auth_service_hash_password_round_trip():
    password_hash = AuthService.hash_password("muddle", rounds=4)
    assert AuthService.verify_password("muddle", password_hash) is True
    assert AuthService.verify_password("stir", password_hash) is False


# =============================================================================
# IMAGE SERVICE TESTS
# =============================================================================


def _image_bytes(fmt="PNG", size=(40, 30), mode="RGBA"):
    buffer = io.BytesIO()
    Image.new(mode, size, (200, 30, 60, 128) if mode == "RGBA" else (200, 30, 60)).save(
        buffer, fmt
    )
    return buffer.getvalue()


def test_image_service_stores_jpeg(tmp_path: Path):
    url = ImageService.store_image(_image_bytes(), upload_dir=tmp_path)

    filename = url.rsplit("/", 1)[-1]
    assert url.startswith(f"{settings.public_base_url}{settings.upload_url_prefix}/")
    assert filename.endswith(".jpg")
    with Image.open(tmp_path / filename) as stored:
        assert stored.format == "JPEG"
        assert stored.size == (40, 30)


def test_image_service_rejects_bad_input(tmp_path: Path, monkeypatch):
    with pytest.raises(ServiceValidationError):
        ImageService.store_image(b"", upload_dir=tmp_path)
    with pytest.raises(ServiceValidationError):
        ImageService.store_image(b"definitely not an image", upload_dir=tmp_path)

    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    with pytest.raises(ServiceValidationError):
        ImageService.store_image(_image_bytes(), upload_dir=tmp_path)

    assert list(tmp_path.iterdir()) == []
