#!venv/bin/python
import os
import re
import sys

SUBS = [
    ("async def", "def"),
    ("async with", "with"),
    ("await ", ""),
    ("AsyncFileStorage", "FileStorage"),
    ("AsyncBaseStorage", "BaseStorage"),
    ("AsyncFileManager", "FileManager"),
    ("AsyncKeyLock", "KeyLock"),
    ("AsyncFetcher", "Fetcher"),
    ("AsyncConditionalCache", "ConditionalCache"),
    ("MockAsyncTransport", "MockTransport"),
    ("AsyncBaseTransport", "BaseTransport"),
    ("AsyncClient", "Client"),
    ("handle_async_request", "handle_request"),
    ("async for", "for"),
    ("aread", "read"),
    ("aiter_raw", "iter_raw"),
    ("aclose", "close"),
    ("__aenter__", "__enter__"),
    ("__aexit__", "__exit__"),
    (r"^@pytest\.mark\.anyio\n", ""),
]
COMPILED_SUBS = [(re.compile(r"(^|\b)" + regex + r"($|\b)"), repl) for regex, repl in SUBS]

# async source -> generated sync counterpart
DIRECTORIES = [
    ("cget/_async", "cget/_sync"),
    ("tests/_async", "tests/_sync"),
]

USED_SUBS = set()


def unasync_line(line):
    for index, (regex, repl) in enumerate(COMPILED_SUBS):
        old_line = line
        line = re.sub(regex, repl, line)
        if line != old_line:
            USED_SUBS.add(index)
    return line


def unasync_source(in_path):
    with open(in_path) as in_file:
        return "".join(unasync_line(line) for line in in_file.readlines())


def unasync_file(in_path, out_path):
    with open(out_path, "w", newline="") as out_file:
        out_file.write(unasync_source(in_path))


def unasync_file_check(in_path, out_path):
    expected = unasync_source(in_path)
    if not os.path.exists(out_path):
        print(f"missing generated file {out_path!r} for {in_path!r}")
        sys.exit(1)
    with open(out_path) as out_file:
        actual = out_file.read()
    if actual == expected:
        return
    for lineno, (expected_line, actual_line) in enumerate(
        zip(expected.splitlines(), actual.splitlines()), start=1
    ):
        if expected_line != actual_line:
            print(f"unasync mismatch between {in_path!r} and {out_path!r} at line {lineno}")
            print(f"Expected sync code: {expected_line!r}")
            print(f"Actual sync code:   {actual_line!r}")
            break
    else:
        print(f"unasync mismatch between {in_path!r} and {out_path!r}: different length")
    sys.exit(1)


def unasync_dir(in_dir, out_dir, check_only=False):
    for filename in sorted(os.listdir(in_dir)):
        if not filename.endswith(".py"):
            continue
        in_path = os.path.join(in_dir, filename)
        out_path = os.path.join(out_dir, filename)
        print(in_path, "->", out_path)
        if check_only:
            unasync_file_check(in_path, out_path)
        else:
            unasync_file(in_path, out_path)


def main():
    check_only = "--check" in sys.argv
    for in_dir, out_dir in DIRECTORIES:
        unasync_dir(in_dir, out_dir, check_only=check_only)

    unused_subs = [SUBS[i] for i in range(len(SUBS)) if i not in USED_SUBS]
    if unused_subs:
        print("These substitutions were not used:")
        for regex, repl in unused_subs:
            print(f"  {regex!r} -> {repl!r}")
        sys.exit(1)


if __name__ == "__main__":
    main()
