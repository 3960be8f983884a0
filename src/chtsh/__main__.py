from chtsh.cli import main

main()
