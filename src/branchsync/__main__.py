from branchsync.cli import main

main()
