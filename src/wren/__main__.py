from wren.cli import main

main()
