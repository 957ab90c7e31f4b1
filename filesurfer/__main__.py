"""Module entrypoint for ``python -m filesurfer``.

All argument parsing and session setup happen in ``filesurfer.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
