from cpush.cli.app import main

main()
