from dappstrap.pipeline import main

main()
