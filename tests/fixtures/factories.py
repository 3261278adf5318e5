from uuid import uuid4

import pytest
from factory import (
    Factory,  # type: ignore
    Faker,  # type: ignore
    LazyFunction,  # type: ignore
    Sequence,  # type: ignore
)

from forexvolcano.core.enums import PostPrivacy
from forexvolcano.crud import post as posts_crud
from forexvolcano.crud import user as users_crud
from forexvolcano.models.post import Post, PostCreate
from forexvolcano.models.user import UserProfile, UserRegister
from forexvolcano.store import DocumentStore

__all__ = [
    "user_register_factory",
    "user_factory",
    "post_create_factory",
    "post_factory",
]


def _persisting(factory_class: type[Factory], save) -> type[Factory]:
    """Subclass ``factory_class`` so that ``create`` writes through ``save``."""

    class PersistingFactory(factory_class):  # type: ignore[valid-type, misc]
        class Meta:
            model = factory_class._meta.model

        @classmethod
        def _create(cls, model_class, *args, **kwargs):
            return save(model_class(*args, **kwargs))

    return PersistingFactory


# --------------------------------------
# FACTORIES
# --------------------------------------


class UserRegisterFactory(Factory):
    class Meta:
        model = UserRegister

    email = Sequence(lambda n: f"register{n}@example.com")
    password = "correct-horse-battery"
    username = Sequence(lambda n: f"register{n}")


@pytest.fixture
def user_register_factory():
    return UserRegisterFactory


class UserProfileFactory(Factory):
    class Meta:
        model = UserProfile

    uid = LazyFunction(lambda: uuid4().hex)
    username = Sequence(lambda n: f"user{n}")
    email = Sequence(lambda n: f"user{n}@example.com")
    bio = Faker("sentence")
    created_at = Sequence(lambda n: 1_700_000_000.0 + n)


@pytest.fixture
def user_factory(store: DocumentStore):
    return _persisting(
        UserProfileFactory,
        lambda user: users_crud.create_user(store=store, user=user),
    )


class PostCreateFactory(Factory):
    class Meta:
        model = PostCreate

    content = Faker("sentence")
    privacy = PostPrivacy.PUBLIC


@pytest.fixture
def post_create_factory():
    return PostCreateFactory


class PostFactory(Factory):
    class Meta:
        model = Post

    id = LazyFunction(lambda: uuid4().hex)
    author_uid = LazyFunction(lambda: uuid4().hex)
    content = Faker("sentence")
    privacy = PostPrivacy.PUBLIC
    created_at = Sequence(lambda n: 1_700_000_000.0 + n)


@pytest.fixture
def post_factory(store: DocumentStore):
    return _persisting(
        PostFactory,
        lambda post: posts_crud.create_post(store=store, post=post),
    )
