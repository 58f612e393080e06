"""Run the interactive banking shell with ``python -m online_banking``"""

from .shell import main


if __name__ == "__main__":
    main()
