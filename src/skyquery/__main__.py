from skyquery.cli import main

main(prog_name="skyquery")
