from headerpack.cli import main

main()
