# dbctl/__main__.py

from dbctl.dbctl import main

if __name__ == "__main__":
    main()
