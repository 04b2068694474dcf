from docsmith.cli import main

raise SystemExit(main())
