from vocalstress.cli import main

main()
