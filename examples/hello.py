"""Demo module: one command per calling convention.

    cmdlets -m examples "hello(world)" "welcome(name: 'randy')" "foo * bar * repeat(2)"
"""

import asyncio

from cmdlets.core.types import Convention


def setup(registrar):
    # callback style: done(error, value)
    def hello(whom, done):
        who = whom or registrar.config.get("who", "world")
        registrar.message(f"Hello {who}!")
        done(None, who)

    registrar.command(
        "hello", hello, help="Say Hello, hello(whom)", convention=Convention.CALLBACK
    )

    @registrar.command("welcome", help="Say Welcome, welcome(name: 'randy')")
    async def welcome(args):
        registrar.message(f"Welcome {args['name']}!")

    # plain function returning an awaitable
    @registrar.command("foo", help="Say FOO")
    def foo(_args=None):
        registrar.message("Hello FOO!")
        return asyncio.sleep(0)

    @registrar.command("bar", help="Say BAR")
    def bar(_args=None):
        registrar.message("Hello BAR!")

    @registrar.command("dummy", help="async dummy demo", group="dummy")
    async def dummy(_args=None):
        registrar.message("dummy!")
