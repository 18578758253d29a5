from app.mphc.run import main

if __name__ == "__main__":
    # Runs one interactive download session; see ``python main.py --help``.
    raise SystemExit(main())
