# main.py
from pivx_indexer.cli.cli import main

if __name__ == "__main__":
    main()
