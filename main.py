from rich.pretty import pprint

from commodore import *

program = command("pizza", shell=True, colorful=True).version("0.0.1")
program.description("order a pizza from the command line")
program.option("-p, --peppers", "add peppers")
program.option("-c, --cheese [type]", "add the specified type of cheese")
program.option("-s, --size <size>", "pizza size", str.upper)
program.option("--no-sauce", "remove sauce")

program.command("deliver <address> [floor]").description("deliver to an address").action(
    lambda address, floor="ground": pprint({"address": address, "floor": floor})
)


if __name__ == '__main__':
    invoke(program)
    pprint(program.values)
