"""User model for staff authentication.

Staff users (``is_staff``) operate the inventory; everyone else can sign in
to nothing but their own profile.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user with a unique, normalized email used for sign-in."""

    email = models.EmailField(unique=True)

    def save(self, *args, **kwargs):
        """Store the email lowercased and trimmed so lookups are reliable."""
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
