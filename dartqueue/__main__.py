from dartqueue.main import main

main()
