from scripts.select_lines_color import main

# === same as: python -m scripts.select_lines_color --image data/A.png ===
if __name__ == "__main__":
    main()
