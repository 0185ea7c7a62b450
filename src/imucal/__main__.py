from imucal.cli import main

if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
