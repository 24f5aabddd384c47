"""Issue a bearer token for the gateway. Run with: python -m scripts.issue_token <subject> [role]"""
import sys

from app.config import settings
from app.core.security import create_access_token


def main(argv: list[str]) -> int:
    if not argv:
        print("usage: python -m scripts.issue_token <subject> [role]", file=sys.stderr)
        return 2
    subject = argv[0]
    role = argv[1] if len(argv) > 1 else "user"
    print(create_access_token(subject, role=role))
    print(
        f"  Expires in {settings.access_token_expire_minutes} minutes",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
