from nine_ladies.cli import main

raise SystemExit(main())
