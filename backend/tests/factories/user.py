"""Factory Boy definition for :class:`authapi.models.user.User`."""

from __future__ import annotations

import factory

from authapi.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!long"


class UserFactory(BaseFactory):
    """Build persisted :class:`User` instances with a known password."""

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    # Hashed by the model's write-only ``password`` setter.
    password = DEFAULT_PASSWORD
