"""Create a staff account, or reset the password of an existing one.

Credentials come from options or the ADMIN_EMAIL / ADMIN_PASSWORD settings.
"""

from decouple import config
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction


class Command(BaseCommand):
    help = "Create a staff user, or reset its password and staff flags if the email already exists"

    def add_arguments(self, parser):
        parser.add_argument("--email", default=config("ADMIN_EMAIL", default=""))
        parser.add_argument("--password", default=config("ADMIN_PASSWORD", default=""))
        parser.add_argument("--username", help="Defaults to the part of the email before @")
        parser.add_argument("--superuser", action="store_true", help="Also grant superuser status")
        parser.add_argument(
            "--skip-validation", action="store_true", help="Do not run the configured password validators"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        email = (options["email"] or "").strip().lower()
        password = options["password"] or ""
        if not email or not password:
            raise CommandError("Both --email and --password (or ADMIN_EMAIL / ADMIN_PASSWORD) are required.")

        User = get_user_model()
        user = User.objects.filter(email=email).first()
        created = user is None
        if created:
            username = options.get("username") or email.split("@", 1)[0]
            if User.objects.filter(username__iexact=username).exists():
                raise CommandError(f"Username '{username}' is already taken; pass --username to choose another.")
            user = User(email=email, username=username)

        if not options["skip_validation"]:
            try:
                validate_password(password, user=user)
            except ValidationError as exc:
                raise CommandError("; ".join(exc.messages))

        user.set_password(password)
        user.is_staff = True
        user.is_active = True
        if options["superuser"]:
            user.is_superuser = True
        user.save()

        verb = "Created" if created else "Reset"
        self.stdout.write(self.style.SUCCESS(f"{verb} staff user {user.email} (id={user.pk})"))
