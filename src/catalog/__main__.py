from src.catalog.cli import main

main()
