from covmed.covmed import main


main()
