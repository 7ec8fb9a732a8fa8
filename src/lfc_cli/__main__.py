from lfc_cli.cli import main

main()
