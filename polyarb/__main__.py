from polyarb.cli.main import main

main()
