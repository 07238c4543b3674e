import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from giftlink.accounts import AccountService
from giftlink.config import load_settings
from giftlink.database import DatabaseProvider, UserStore
from giftlink.errors import DuplicateAccountError
from giftlink.security import TokenSigner, build_password_context

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 32


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a GiftLink account")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument("first_name", help="Given name shown to other members")
    parser.add_argument("last_name", help="Family name")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML settings file (defaults to GIFTLINK_CONFIG or config/giftlink.yaml)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
            print(
                f"Password must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} characters long.",
                file=sys.stderr,
            )
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    load_dotenv()
    args = parse_args()
    password = prompt_for_password()

    settings = load_settings(args.config)
    provider = DatabaseProvider.from_settings(settings)
    store = UserStore(provider)
    store.initialize()

    accounts = AccountService(
        store,
        TokenSigner(settings.jwt_secret),
        password_context=build_password_context(settings.bcrypt_rounds),
    )

    try:
        result = accounts.register(
            email=args.email.strip(),
            first_name=args.first_name.strip(),
            last_name=args.last_name.strip(),
            password=password,
        )
    except DuplicateAccountError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        provider.close()

    user = result.user
    print(f"Created user {user.id}: {user.first_name} {user.last_name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
