from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

import uuid


# ---------- USER MANAGER ----------
class UserManager(BaseUserManager):
    """Custom user manager that normalizes email and defaults the nickname.

    Use `create_user` and `create_superuser` as the canonical constructors.
    """

    def _create_user(self, email: str, password: str | None = None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        extra_fields.setdefault("nickname", email.split("@")[0])
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if not extra_fields.get("is_staff"):
            raise ValueError("Superuser must have is_staff=True.")
        if not extra_fields.get("is_superuser"):
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


# ---------- USER MODEL ----------
class User(AbstractBaseUser, PermissionsMixin):
    """Marketplace identity and public profile in one row.

    - UUID primary key, immutable once created.
    - Email is the login identifier (USERNAME_FIELD).
    - `nickname` and `avatar` are the mutable display fields shown to
      other users on listings and in chat.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(_("email address"), unique=True, db_index=True)
    nickname = models.CharField(_("nickname"), max_length=50)
    avatar = models.ImageField(upload_to="avatars/", blank=True, null=True)

    # Status
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["nickname"]

    class Meta:
        db_table = "users"
        verbose_name = _("user")
        verbose_name_plural = _("users")

    def save(self, *args, **kwargs):
        if not self.nickname and self.email:
            self.nickname = self.email.split("@")[0]
        super().save(*args, **kwargs)

    # ----- Display helpers -----
    def get_full_name(self) -> str:
        return self.nickname

    def get_short_name(self) -> str:
        return self.nickname

    def __str__(self) -> str:
        return self.nickname or self.email

    @property
    def avatar_url(self) -> str | None:
        if self.avatar:
            return self.avatar.url
        return None
