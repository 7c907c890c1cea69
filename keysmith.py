import sys
from typing import Optional, Sequence

import command
from session import Session, setup_logging

def main(argv: Optional[Sequence[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    setup_logging()
    session_ = Session()
    if not argv:
        command.run_command("help", [], session_)
        return 2
    return command.run_command(argv[0], list(argv[1:]), session_)

if __name__ == "__main__":
    sys.exit(main())
