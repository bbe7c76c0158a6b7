from wandermart.main import main

main()
