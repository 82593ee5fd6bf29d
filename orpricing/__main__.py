from orpricing.cli.main import main

main()
