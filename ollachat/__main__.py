from ollachat.app import main

main()
