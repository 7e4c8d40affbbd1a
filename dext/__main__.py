from dext.cli import main

main()
