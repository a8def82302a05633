import sys
import traceback

def main():
    try:
        from sysupdater.main import main as cli_main
    except Exception as e:
        print("Fatal startup error:", e)
        traceback.print_exc()
        sys.exit(2)
    sys.exit(cli_main())

if __name__ == "__main__":
    main()
