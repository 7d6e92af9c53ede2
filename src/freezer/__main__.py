from freezer.cli import main

main()
