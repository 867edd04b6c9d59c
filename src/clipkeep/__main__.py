from clipkeep.main import main

main()
