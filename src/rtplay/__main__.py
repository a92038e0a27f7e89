from rtplay.cli import main

raise SystemExit(main())
