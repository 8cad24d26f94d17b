import sys

from take import *

__prog__ = "dev"


@command(flags={
    "verbose": Flag(False, "Show detailed output"),
    "keyword": Flag("", "Only run tests matching the expression", env="TEST_KEYWORD"),
})
async def test(input):
    """Run the test suite"""
    args = ["-m", "pytest", *input.args]
    if input.flags["verbose"]:
        args.append("-v")
    if input.flags["keyword"]:
        args += ["-k", input.flags["keyword"]]
    await spawn(sys.executable, *args)


@command(flags={
    "quiet": Flag(False, "Only report failures"),
})
async def check(input):
    """Byte-compile the package to catch syntax errors"""
    await spawn(sys.executable, "-m", "compileall", *(["-q"] if input.flags["quiet"] else []), "take")


@command(name="ci")
async def ci(input):
    """Check, then test"""
    await input.cmd("check", "--quiet")
    await input.cmd("test")


if __name__ == '__main__':
    register(check, test, ci, docs="README.md", colorful=True)
