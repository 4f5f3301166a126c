"""
Client navigation as a finite-state model.

``AppState`` is immutable. Every transition is a pure function that takes
the current state and returns the next state together with a tuple of
effects; effects are plain data describing the I/O to perform.
``EffectRunner`` performs them against a ``MyMixesClient`` and feeds the
outcomes back through the result transitions.

While ``loading`` is set, transitions that would start another fetch
return no effects.
"""

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Optional, Tuple, Union
import logging

from client.api import ApiError, MyMixesClient
from client.cache import RecipeCache
from client.routing import parse_hash

logger = logging.getLogger("mymixes.client.navigation")


# ============================================================================
# Pages
# ============================================================================


@dataclass(frozen=True)
class Landing:
    name: ClassVar[str] = "landing"


@dataclass(frozen=True)
class Login:
    name: ClassVar[str] = "login"


@dataclass(frozen=True)
class Home:
    """Admin grid"""

    name: ClassVar[str] = "home"


@dataclass(frozen=True)
class Guest:
    """Read-only grid"""

    name: ClassVar[str] = "guest"


@dataclass(frozen=True)
class Create:
    name: ClassVar[str] = "create"


@dataclass(frozen=True)
class Detail:
    recipe_id: int
    slug: str
    name: ClassVar[str] = "detail"


@dataclass(frozen=True)
class Edit:
    recipe_id: int
    slug: str
    name: ClassVar[str] = "edit"


@dataclass(frozen=True)
class Review:
    recipe_id: int
    token: Optional[str] = None
    name: ClassVar[str] = "review"


@dataclass(frozen=True)
class QrManager:
    name: ClassVar[str] = "qr-manager"


Page = Union[Landing, Login, Home, Guest, Create, Detail, Edit, Review, QrManager]

ADMIN_PAGES = (Home, Create, Edit, QrManager)


# ============================================================================
# Effects
# ============================================================================


@dataclass(frozen=True)
class FetchRecipes:
    query: str = ""


@dataclass(frozen=True)
class FetchRecipe:
    recipe_id: int
    slug: str


@dataclass(frozen=True)
class VerifyToken:
    pass


@dataclass(frozen=True)
class ClearToken:
    pass


@dataclass(frozen=True)
class SubmitLogin:
    password: str


@dataclass(frozen=True)
class SaveRecipe:
    """Create when ``recipe_id`` is None, otherwise replace"""

    payload: Dict[str, Any]
    recipe_id: Optional[int] = None


@dataclass(frozen=True)
class DeleteRecipe:
    recipe_id: int


@dataclass(frozen=True)
class LoadReviewRecipe:
    recipe_id: int


@dataclass(frozen=True)
class SubmitReview:
    recipe_id: int
    token: str
    name: str
    rating: int
    comment: str


@dataclass(frozen=True)
class LoadQrTokens:
    """Tokens and per-recipe counts"""


@dataclass(frozen=True)
class LoadQrCounts:
    pass


@dataclass(frozen=True)
class GenerateQr:
    recipe_id: int


@dataclass(frozen=True)
class DeleteQrToken:
    token_id: str


Effect = Union[
    FetchRecipes,
    FetchRecipe,
    VerifyToken,
    ClearToken,
    SubmitLogin,
    SaveRecipe,
    DeleteRecipe,
    LoadReviewRecipe,
    SubmitReview,
    LoadQrTokens,
    LoadQrCounts,
    GenerateQr,
    DeleteQrToken,
]
Transition = Tuple["AppState", Tuple[Effect, ...]]


# ============================================================================
# State
# ============================================================================


@dataclass(frozen=True)
class AppState:
    page: Page = field(default_factory=Landing)
    is_admin: bool = False
    search: str = ""
    recipes: Tuple[Dict[str, Any], ...] = ()
    current: Optional[Dict[str, Any]] = None
    loading: bool = False
    error: Optional[str] = None
    review_sent: bool = False
    qr_tokens: Tuple[Dict[str, Any], ...] = ()
    qr_counts: Dict[int, int] = field(default_factory=dict)


def initial_state(fragment: Optional[str] = None) -> Transition:
    """Start state for a fresh page load.

    A QR deep link opens the review page directly and loads its recipe;
    anything else lands on the landing page and checks any stored admin
    token.
    """
    route = parse_hash(fragment)
    if route is not None:
        state = AppState(page=Review(route.recipe_id, route.token))
        if not route.token:
            return replace(state, error="QR token is required"), ()
        return _start_fetch(state, LoadReviewRecipe(route.recipe_id))
    return AppState(), (VerifyToken(),)


def _start_fetch(state: AppState, *effects: Effect) -> Transition:
    if state.loading:
        return state, ()
    return replace(state, loading=True, error=None), effects


def _grid_page(state: AppState) -> Page:
    return Home() if state.is_admin else Guest()


# ---- navigation ----


def go_landing(state: AppState) -> Transition:
    return replace(state, page=Landing(), current=None, error=None, review_sent=False), ()


def go_login(state: AppState) -> Transition:
    return replace(state, page=Login(), error=None), ()


def go_home(state: AppState) -> Transition:
    """Grid for the current role, refreshed with the active search"""
    state = replace(state, page=_grid_page(state), current=None)
    return _start_fetch(state, FetchRecipes(state.search))


def go_guest(state: AppState) -> Transition:
    state = replace(state, page=Guest(), current=None)
    return _start_fetch(state, FetchRecipes(state.search))


def go_create(state: AppState) -> Transition:
    if not state.is_admin:
        return go_login(state)
    return replace(state, page=Create(), current=None, error=None), ()


def open_detail(state: AppState, recipe_id: int, slug: str) -> Transition:
    state = replace(state, page=Detail(recipe_id, slug), current=None)
    return _start_fetch(state, FetchRecipe(recipe_id, slug))


def go_edit(state: AppState, recipe_id: int, slug: str) -> Transition:
    if not state.is_admin:
        return go_login(state)
    state = replace(state, page=Edit(recipe_id, slug))
    if state.current and state.current.get("id") == recipe_id:
        return state, ()
    return _start_fetch(state, FetchRecipe(recipe_id, slug))


def go_qr_manager(state: AppState) -> Transition:
    """QR page; loads tokens and counts, plus the recipe picker list if empty"""
    if not state.is_admin:
        return go_login(state)
    state = replace(state, page=QrManager(), current=None)
    if state.recipes:
        return _start_fetch(state, LoadQrTokens())
    return _start_fetch(state, FetchRecipes(state.search), LoadQrTokens())


def set_search(state: AppState, search: str) -> Transition:
    state = replace(state, search=search)
    if isinstance(state.page, (Home, Guest)):
        return _start_fetch(state, FetchRecipes(search))
    return state, ()


# ---- user actions ----


def submit_login(state: AppState, password: str) -> Transition:
    if not password:
        return replace(state, error="Password is required"), ()
    return _start_fetch(state, SubmitLogin(password))


def save_recipe(
    state: AppState, payload: Dict[str, Any], recipe_id: Optional[int] = None
) -> Transition:
    if not state.is_admin:
        return go_login(state)
    return _start_fetch(state, SaveRecipe(payload, recipe_id))


def delete_recipe(state: AppState, recipe_id: int) -> Transition:
    if not state.is_admin:
        return go_login(state)
    return _start_fetch(state, DeleteRecipe(recipe_id))


def submit_review(state: AppState, name: str, rating: int, comment: str) -> Transition:
    """Post the review form of a QR deep link"""
    page = state.page
    if not isinstance(page, Review):
        return state, ()
    if not page.token:
        return replace(state, error="QR token is required"), ()
    if not name.strip():
        return replace(state, error="Please enter your name"), ()
    if not comment.strip():
        return replace(state, error="Please write a comment"), ()
    return _start_fetch(
        state,
        SubmitReview(page.recipe_id, page.token, name.strip(), rating, comment.strip()),
    )


def generate_qr(state: AppState, recipe_id: int) -> Transition:
    if not state.is_admin:
        return go_login(state)
    return _start_fetch(state, GenerateQr(recipe_id))


def delete_qr_token(state: AppState, token_id: str) -> Transition:
    if not state.is_admin:
        return go_login(state)
    return _start_fetch(state, DeleteQrToken(token_id))


def logout(state: AppState) -> Transition:
    return AppState(search=state.search), (ClearToken(),)


# ---- results ----


def recipes_loaded(state: AppState, items) -> Transition:
    return replace(state, recipes=tuple(items), loading=False, error=None), ()


def recipe_loaded(state: AppState, recipe: Dict[str, Any]) -> Transition:
    return replace(state, current=recipe, loading=False, error=None), ()


def recipe_saved(state: AppState, recipe: Dict[str, Any]) -> Transition:
    page = Detail(recipe["id"], recipe["slug"])
    return replace(state, page=page, current=recipe, loading=False, error=None), ()


def recipe_deleted(state: AppState, recipe_id: int) -> Transition:
    state = replace(
        state,
        recipes=tuple(r for r in state.recipes if r.get("id") != recipe_id),
        loading=False,
    )
    return go_home(state)


def login_succeeded(state: AppState) -> Transition:
    return go_home(replace(state, is_admin=True, loading=False, error=None))


def token_verified(state: AppState, valid: bool) -> Transition:
    if valid:
        return replace(state, is_admin=True), ()
    if state.is_admin or isinstance(state.page, ADMIN_PAGES):
        return replace(state, is_admin=False, page=Login()), ()
    return replace(state, is_admin=False), ()


def review_submitted(state: AppState, review: Dict[str, Any]) -> Transition:
    return replace(state, review_sent=True, loading=False, error=None), ()


def review_failed(state: AppState, error: ApiError) -> Transition:
    """The form stays open with the server's message"""
    return replace(state, review_sent=False, loading=False, error=error.message), ()


def qr_tokens_loaded(state: AppState, tokens, counts: Dict[int, int]) -> Transition:
    state = replace(
        state, qr_tokens=tuple(tokens), qr_counts=dict(counts), loading=False, error=None
    )
    return state, ()


def qr_counts_loaded(state: AppState, counts: Dict[int, int]) -> Transition:
    return replace(state, qr_counts=dict(counts)), ()


def qr_generated(state: AppState, qr_token: Dict[str, Any]) -> Transition:
    state = replace(
        state, qr_tokens=(qr_token,) + state.qr_tokens, loading=False, error=None
    )
    return state, (LoadQrCounts(),)


def qr_token_deleted(state: AppState, token_id: str) -> Transition:
    state = replace(
        state,
        qr_tokens=tuple(t for t in state.qr_tokens if t.get("id") != token_id),
        loading=False,
        error=None,
    )
    return state, (LoadQrCounts(),)


def request_failed(state: AppState, error: ApiError) -> Transition:
    state = replace(state, loading=False, error=error.message)
    if error.status_code == 401 and state.is_admin:
        return replace(state, is_admin=False, page=Login()), ()
    return state, ()


# ============================================================================
# Effect runner
# ============================================================================


class EffectRunner:
    """Performs effects and folds their results back into the state"""

    def __init__(self, client: MyMixesClient, cache: Optional[RecipeCache] = None):
        self.client = client
        self.cache = cache if cache is not None else RecipeCache()

    def run(self, transition: Transition) -> AppState:
        """Drain the effects of ``transition`` and any they trigger"""
        state, effects = transition
        queue = list(effects)
        while queue:
            effect = queue.pop(0)
            try:
                state, more = self._perform(state, effect)
            except ApiError as e:
                logger.info(f"effect_failed effect={type(effect).__name__} status={e.status_code}")
                state, more = request_failed(state, e)
            queue.extend(more)
        return state

    def _perform(self, state: AppState, effect: Effect) -> Transition:
        if isinstance(effect, FetchRecipes):
            page = self.client.fetch_recipes(effect.query or None)
            return recipes_loaded(state, page["items"])

        if isinstance(effect, FetchRecipe):
            cached = self.cache.get(effect.recipe_id)
            if cached is None:
                cached = self.client.fetch_recipe(effect.slug)
                self.cache.put(cached)
            return recipe_loaded(state, cached)

        if isinstance(effect, VerifyToken):
            return token_verified(state, self.client.verify_token())

        if isinstance(effect, ClearToken):
            self.client.logout()
            return state, ()

        if isinstance(effect, SubmitLogin):
            self.client.login(effect.password)
            return login_succeeded(state)

        if isinstance(effect, SaveRecipe):
            if effect.recipe_id is None:
                recipe = self.client.create_recipe(effect.payload)
            else:
                recipe = self.client.update_recipe(effect.recipe_id, effect.payload)
            self.cache.put(recipe)
            return recipe_saved(state, recipe)

        if isinstance(effect, DeleteRecipe):
            self.client.delete_recipe(effect.recipe_id)
            self.cache.invalidate(effect.recipe_id)
            return recipe_deleted(state, effect.recipe_id)

        if isinstance(effect, LoadReviewRecipe):
            recipe = self.cache.get(effect.recipe_id)
            if recipe is None:
                recipe = self.client.fetch_recipe_by_id(effect.recipe_id)
                self.cache.put(recipe)
            return recipe_loaded(state, recipe)

        if isinstance(effect, SubmitReview):
            try:
                review = self.client.post_anonymous_review(
                    effect.recipe_id, effect.token, effect.name, effect.rating, effect.comment
                )
            except ApiError as e:
                logger.info(f"review_rejected recipe_id={effect.recipe_id} status={e.status_code}")
                return review_failed(state, e)
            # avgRating changed server side
            self.cache.invalidate(effect.recipe_id)
            return review_submitted(state, review)

        if isinstance(effect, LoadQrTokens):
            tokens = self.client.list_qr_tokens()
            return qr_tokens_loaded(state, tokens, self.client.qr_counts())

        if isinstance(effect, LoadQrCounts):
            return qr_counts_loaded(state, self.client.qr_counts())

        if isinstance(effect, GenerateQr):
            return qr_generated(state, self.client.generate_qr(effect.recipe_id))

        if isinstance(effect, DeleteQrToken):
            self.client.delete_qr_token(effect.token_id)
            return qr_token_deleted(state, effect.token_id)

        raise TypeError(f"Unknown effect: {effect!r}")
