"""Package entry point for ``python -m goodear``.

WHY: Users run the tool as ``python -m goodear sections lesson1.srt``
without needing the console script installed.

HOW: Delegates straight to the CLI's main() function.
"""

from goodear.cli import main

if __name__ == "__main__":
    main()
