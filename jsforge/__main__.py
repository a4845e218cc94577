from jsforge.pipeline import main

main()
